"""
mutamba_erp.provisioning

Privileged, server-revalidated operations on users.

Responsibilities:
- `createUser`: create an identity plus its directory entry.
- `setUserRole`: change another user's role.
"""

from mutamba_erp.provisioning.service import UserProvisioner

__all__ = ["UserProvisioner"]
