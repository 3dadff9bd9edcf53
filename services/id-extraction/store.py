"""Supabase (PostgREST) persistence for raw extractions and personal profiles.

Each call is an independent request; the two tables are never written in a
shared transaction.
"""

import logging
from typing import Any, Protocol

import httpx

from config import settings
from errors import PersistenceError, ServiceNotConfigured

logger = logging.getLogger(__name__)

# PostgREST error code for "JSON object requested, multiple (or no) rows returned"
NOT_FOUND_CODE = "PGRST116"

_SINGLE_OBJECT = "application/vnd.pgrst.object+json"


class RawDataStore(Protocol):
    def upsert_raw_data(self, user_id: str, record: dict[str, Any], updated_at: str) -> None: ...


class ProfileStore(Protocol):
    def get_profile(self, user_id: str) -> dict[str, Any] | None: ...

    def insert_profile(self, row: dict[str, Any]) -> dict[str, Any]: ...

    def update_profile(self, user_id: str, values: dict[str, Any]) -> dict[str, Any]: ...


class SupabaseStore:
    """Minimal PostgREST client for the two tables the pipeline writes."""

    def __init__(
        self,
        url: str | None = None,
        service_key: str | None = None,
        raw_table: str | None = None,
        profile_table: str | None = None,
        timeout: int | None = None,
    ):
        self._url = (url if url is not None else settings.SUPABASE_URL).rstrip("/")
        self._service_key = service_key if service_key is not None else settings.SUPABASE_SERVICE_ROLE_KEY
        self._raw_table = raw_table or settings.RAW_DATA_TABLE
        self._profile_table = profile_table or settings.PROFILE_TABLE

        read_timeout = timeout if timeout is not None else settings.SUPABASE_TIMEOUT_SECONDS

        self._client = httpx.Client(
            base_url=f"{self._url}/rest/v1" if self._url else "",
            timeout=float(read_timeout),
            headers={
                "apikey": self._service_key,
                "Authorization": f"Bearer {self._service_key}",
            },
        )

    @property
    def configured(self) -> bool:
        return bool(self._url and self._service_key)

    def close(self):
        self._client.close()

    def upsert_raw_data(self, user_id: str, record: dict[str, Any], updated_at: str) -> None:
        """Insert or fully replace the raw extraction row for ``user_id``."""
        self._request(
            "POST",
            f"/{self._raw_table}",
            params={"on_conflict": "user_id"},
            json={
                "user_id": user_id,
                "extracted_data": record,
                "updated_at": updated_at,
            },
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def get_profile(self, user_id: str) -> dict[str, Any] | None:
        """Return the profile row for ``user_id``, or None if there is none."""
        try:
            resp = self._request(
                "GET",
                f"/{self._profile_table}",
                params={"id": f"eq.{user_id}", "select": "*"},
                headers={"Accept": _SINGLE_OBJECT},
            )
        except PersistenceError as e:
            if e.code == NOT_FOUND_CODE:
                return None
            raise
        return resp.json()

    def insert_profile(self, row: dict[str, Any]) -> dict[str, Any]:
        resp = self._request(
            "POST",
            f"/{self._profile_table}",
            json=row,
            headers={"Prefer": "return=representation", "Accept": _SINGLE_OBJECT},
        )
        return resp.json()

    def update_profile(self, user_id: str, values: dict[str, Any]) -> dict[str, Any]:
        resp = self._request(
            "PATCH",
            f"/{self._profile_table}",
            params={"id": f"eq.{user_id}"},
            json=values,
            headers={"Prefer": "return=representation", "Accept": _SINGLE_OBJECT},
        )
        return resp.json()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        if not self.configured:
            raise ServiceNotConfigured("Supabase credentials not configured")

        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Supabase request failed: %s %s: %s", method, path, e)
            raise PersistenceError(f"Database request failed: {e}") from e

        if resp.is_success:
            return resp

        message, code = _error_details(resp)
        if code != NOT_FOUND_CODE:
            logger.error("Supabase error %d on %s %s: %s (%s)", resp.status_code, method, path, message, code)
        raise PersistenceError(message, code=code)


def _error_details(resp: httpx.Response) -> tuple[str, str | None]:
    """Pull PostgREST's message and code out of an error response."""
    try:
        body = resp.json()
    except ValueError:
        return f"Database error: HTTP {resp.status_code}", None

    if not isinstance(body, dict):
        return f"Database error: HTTP {resp.status_code}", None
    return body.get("message") or f"Database error: HTTP {resp.status_code}", body.get("code")
