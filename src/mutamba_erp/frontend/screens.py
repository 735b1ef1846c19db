"""
mutamba_erp.frontend.screens

Top-level screen selection.
"""

from __future__ import annotations

import enum

from mutamba_erp.session.context import AccessState
from mutamba_erp.settings import Settings

CONFIG_ERROR_MESSAGE = "Variáveis de configuração do backend não definidas."


class Screen(enum.StrEnum):
    config_error = "CONFIG_ERROR"
    loading = "LOADING"
    login = "LOGIN"
    app = "APP"


def select_screen(settings: Settings, state: AccessState | None) -> Screen:
    # Configuration is checked first: without it no context can exist.
    if not settings.backend_configured or state is None:
        return Screen.config_error
    if state.loading:
        return Screen.loading
    if state.identity is None:
        return Screen.login
    return Screen.app
