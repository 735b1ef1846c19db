"""
mutamba_erp.errors

Error taxonomy shared by the backend, the client core and the API layer.

Responsibilities:
- Define the machine-readable error kinds returned by callable functions.
- Define identity/directory/configuration failures raised by the core.
- Rebuild a typed error from a wire `kind` on the client side.
"""

from __future__ import annotations

from typing import ClassVar


class ErpError(Exception):
    """Base class for every error this package raises on purpose."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class FunctionError(ErpError):
    """
    Failure of a callable function. `kind` is the stable wire identifier; `message`
    is shown verbatim to the admin who triggered the call.
    """

    kind: ClassVar[str] = "internal"
    default_message: ClassVar[str] = "Ocorreu um erro interno."

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None) -> None:
        super().__init__(message or self.default_message)
        self.cause = cause

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class Unauthenticated(FunctionError):
    kind = "unauthenticated"
    default_message = "A requisição deve ser feita por um usuário autenticado."


class PermissionDenied(FunctionError):
    kind = "permission-denied"
    default_message = "Apenas administradores podem executar esta operação."


class InvalidArgument(FunctionError):
    kind = "invalid-argument"
    default_message = "Argumentos inválidos."


class AlreadyExists(FunctionError):
    kind = "already-exists"
    default_message = "Este e-mail já está em uso por outro usuário."


class Internal(FunctionError):
    kind = "internal"
    default_message = "Ocorreu um erro interno."


_FUNCTION_ERRORS: dict[str, type[FunctionError]] = {
    cls.kind: cls
    for cls in (Unauthenticated, PermissionDenied, InvalidArgument, AlreadyExists, Internal)
}


def function_error_from_kind(kind: str, message: str | None = None) -> FunctionError:
    # Unknown kinds collapse to Internal so a client never invents a softer outcome.
    cls = _FUNCTION_ERRORS.get(kind, Internal)
    return cls(message)


class ConfigurationMissing(ErpError):
    """Raised at startup (or first use) when the backend configuration is absent."""

    kind: ClassVar[str] = "configuration-missing"

    def __init__(self, setting: str) -> None:
        super().__init__(f"Backend configuration value {setting} is not set")
        self.setting = setting


class AuthFailed(ErpError):
    """Sign-in rejected. The message never says which part of the credentials was wrong."""

    def __init__(self, message: str = "Falha ao fazer login. Verifique suas credenciais.") -> None:
        super().__init__(message)


class InvalidSession(ErpError):
    pass


class EmailAlreadyExists(ErpError):
    def __init__(self, email: str) -> None:
        super().__init__(f"identity already exists for {email}")
        self.email = email


class DirectoryUnavailable(ErpError):
    """The user directory could not be read or written."""


# --- Module Notes -----------------------------------------------------------
# Wire kinds are part of the client/server contract; treat them as stable API.
