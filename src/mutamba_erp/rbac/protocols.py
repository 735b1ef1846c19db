"""
mutamba_erp.rbac.protocols

Interfaces of the user directory as seen by the RBAC core.

Both the SQL repository (server) and the HTTP directory client (client) satisfy
these structurally; the core never imports either implementation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from mutamba_erp.auth.models import DirectoryEntry


class DirectoryReader(Protocol):
    async def read_one(self, uid: str) -> DirectoryEntry | None:
        """Return the entry for `uid`, None if absent. Raise DirectoryUnavailable on I/O failure."""
        ...


class DirectoryWriter(DirectoryReader, Protocol):
    async def write_one(self, uid: str, fields: Mapping[str, Any]) -> None:
        """Create or merge document-shaped fields. Raise DirectoryUnavailable on failure."""
        ...
