"""
mutamba_erp.session.protocols

Identity-provider operations the Access Context consumes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from mutamba_erp.auth.models import AuthStateChange


class IdentityProvider(Protocol):
    def on_auth_state_changed(
        self, listener: Callable[[AuthStateChange], None]
    ) -> Callable[[], None]:
        """Register `listener`; return a function that unregisters it."""
        ...

    async def sign_out(self) -> None: ...
