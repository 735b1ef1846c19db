"""
mutamba_erp.frontend.shell

Client composition root.

Responsibilities:
- Build the client stack once per process (backend client, identity provider,
  role resolver over the HTTP directory, access context, controllers) and pass
  it explicitly to whatever renders screens.
- Tear everything down in reverse order.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from mutamba_erp.client.backend import BackendClient
from mutamba_erp.client.directory import HttpDirectory
from mutamba_erp.client.functions import CallableFunctions
from mutamba_erp.client.identity import ClientIdentityProvider
from mutamba_erp.frontend.controllers import LoginController, UsersController
from mutamba_erp.frontend.navigation import NavItem, can_open, visible_nav_items
from mutamba_erp.frontend.screens import Screen, select_screen
from mutamba_erp.rbac.resolver import RoleResolver
from mutamba_erp.session.context import AccessContext
from mutamba_erp.settings import Settings

HOME_PAGE = "dashboard"


@dataclass(slots=True)
class Shell:
    settings: Settings
    backend: BackendClient
    identity: ClientIdentityProvider
    access: AccessContext
    login: LoginController
    users: UsersController
    page: str = HOME_PAGE

    @classmethod
    @asynccontextmanager
    async def open(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> AsyncIterator[Shell]:
        # Raises ConfigurationMissing before any network object is created.
        backend = BackendClient.create(settings, transport=transport)
        identity = ClientIdentityProvider(backend)
        resolver = RoleResolver(
            directory=HttpDirectory(backend), super_admin_email=settings.super_admin_email
        )
        access = AccessContext(provider=identity, resolver=resolver)
        shell = cls(
            settings=settings,
            backend=backend,
            identity=identity,
            access=access,
            login=LoginController(identity),
            users=UsersController(
                backend=backend,
                functions=CallableFunctions(backend),
                access=access,
                super_admin_email=settings.super_admin_email,
            ),
        )
        access.start()
        try:
            yield shell
        finally:
            await access.close()
            await backend.aclose()

    @property
    def screen(self) -> Screen:
        return select_screen(self.settings, self.access.state)

    def nav_items(self) -> list[NavItem]:
        return visible_nav_items(self.access.state.role)

    @property
    def current_page(self) -> str:
        # A role lost mid-session (sign-out, demotion) falls back to the home page.
        if can_open(self.page, self.access.state.role):
            return self.page
        return HOME_PAGE

    def open_page(self, page_id: str) -> bool:
        if not can_open(page_id, self.access.state.role):
            return False
        self.page = page_id
        return True
