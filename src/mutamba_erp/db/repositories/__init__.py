"""
mutamba_erp.db.repositories

Repository layer (thin persistence API over SQLAlchemy sessions).
"""

# Package marker.
