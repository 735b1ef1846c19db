"""
mutamba_erp.session

Session/Access Context: the client's reactive view of who is signed in and what
they may do.
"""

from mutamba_erp.session.context import AccessContext, AccessState

__all__ = ["AccessContext", "AccessState"]
