"""
mutamba_erp.client.directory

User directory reader over HTTP, for the client-side Role Resolver.
"""

from __future__ import annotations

import httpx

from mutamba_erp.auth.models import DirectoryEntry
from mutamba_erp.client.backend import BackendClient
from mutamba_erp.errors import DirectoryUnavailable


class HttpDirectory:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def read_one(self, uid: str) -> DirectoryEntry | None:
        try:
            doc = await self._backend.get_directory_entry(uid)
        except httpx.HTTPError as e:
            raise DirectoryUnavailable(f"directory read failed for {uid}: {e}") from e
        return DirectoryEntry.from_document(uid, doc) if doc is not None else None
