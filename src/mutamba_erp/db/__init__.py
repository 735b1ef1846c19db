"""
mutamba_erp.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories backing the
  identity provider, the user directory and the audit trail.
"""

# Package marker.
