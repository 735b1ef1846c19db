"""
mutamba_erp.identity

Identity provider hosted by the backend.

Responsibilities:
- Email/password sign-in and session-token issuing.
- Privileged identity creation and deletion (server-side only).
- Super-admin seeding at startup.
"""

# Package marker.
