"""
mutamba_erp.frontend.navigation

Sidebar entries and role gating.
"""

from __future__ import annotations

from dataclasses import dataclass

from mutamba_erp.auth.models import Role


@dataclass(frozen=True, slots=True)
class NavItem:
    id: str
    label: str
    admin_only: bool = False


NAV_ITEMS: tuple[NavItem, ...] = (
    NavItem("dashboard", "Dashboard"),
    NavItem("materias_primas", "Matérias-Primas"),
    NavItem("usuarios", "Usuários", admin_only=True),
)


def visible_nav_items(role: Role | None) -> list[NavItem]:
    return [item for item in NAV_ITEMS if not item.admin_only or role is Role.admin]


def can_open(page_id: str, role: Role | None) -> bool:
    return any(item.id == page_id for item in visible_nav_items(role))
