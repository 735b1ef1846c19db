"""
mutamba_erp.auth

Authentication/authorization primitives.

Responsibilities:
- Identity, Role and Directory Entry types.
- Session-token (JWT) issuing and validation.
- Password hashing.
- FastAPI caller dependencies.
"""

# Package marker.
