"""Lazily loaded, shared Google credentials for the Monitoring API."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import google.auth
import google.auth.transport.requests
from google.auth.credentials import Credentials
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from loguru import logger

from gmonitor import settings
from gmonitor.exceptions import AuthError


class CredentialProvider:
    """Loads credentials once and hands out bearer tokens.

    ``auth_info`` is a service account key (as a mapping or a path to its JSON
    file); without it, application default credentials are used. Concurrent
    first calls share one load. A failed load is not cached.
    """

    def __init__(self, auth_info: Mapping[str, Any] | str | None = None, scopes: list[str] | None = None):
        self._auth_info = auth_info
        self._scopes = scopes or settings.MONITORING_SCOPES
        self._credential: Credentials | None = None
        self._loading: asyncio.Task | None = None
        self._refresh_lock = asyncio.Lock()

    async def get_credential(self) -> Credentials:
        if self._credential is not None:
            return self._credential
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        # Shield so one cancelled caller doesn't cancel the load for the others
        return await asyncio.shield(self._loading)

    async def get_access_token(self) -> str:
        credential = await self.get_credential()
        if not credential.valid:
            async with self._refresh_lock:
                if not credential.valid:
                    try:
                        await asyncio.to_thread(credential.refresh, google.auth.transport.requests.Request())
                    except GoogleAuthError as e:
                        raise AuthError(f"Failed to refresh monitoring credentials: {e}") from e
                    logger.debug("Refreshed monitoring access token")
        return credential.token

    async def _load(self) -> Credentials:
        try:
            credential = await asyncio.to_thread(self._load_sync)
        except (GoogleAuthError, ValueError, OSError) as e:
            raise AuthError(f"Failed to load monitoring credentials: {e}") from e
        finally:
            self._loading = None
        self._credential = credential
        logger.info(f"Loaded monitoring credentials ({type(credential).__name__})")
        return credential

    def _load_sync(self) -> Credentials:
        if isinstance(self._auth_info, str):
            return service_account.Credentials.from_service_account_file(self._auth_info, scopes=self._scopes)
        if self._auth_info is not None:
            return service_account.Credentials.from_service_account_info(dict(self._auth_info), scopes=self._scopes)
        credential, _ = google.auth.default(scopes=self._scopes)
        return credential
