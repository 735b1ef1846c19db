"""
mutamba_erp.api

API package for the Mutamba ERP backend.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and error mapping.
"""

# Package marker.
