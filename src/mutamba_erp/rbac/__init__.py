"""
mutamba_erp.rbac

Role-based access control core.

Responsibilities:
- Directory protocols the core depends on.
- The Role Resolver shared by the client Access Context and the server Provisioner.
"""

from mutamba_erp.rbac.resolver import RoleResolver

__all__ = ["RoleResolver"]
