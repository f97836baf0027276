from __future__ import annotations

import logging
from typing import Any

import httpx

from dropship_branding.config import Settings, settings

logger = logging.getLogger(__name__)

UNKNOWN_COLUMN_ERROR_CODES = frozenset({"PGRST204", "42703"})
NO_ROWS_ERROR_CODE = "PGRST116"


class PersistenceError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: str | None = None,
        hint: str | None = None,
        status_code: int = 500,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details
        self.hint = hint
        self.status_code = status_code

    @property
    def is_unknown_column(self) -> bool:
        return self.code in UNKNOWN_COLUMN_ERROR_CODES

    def relabel(self, message: str) -> "PersistenceError":
        return type(self)(
            message,
            code=self.code,
            details=self.details or self.message,
            hint=self.hint,
            status_code=self.status_code,
        )


class RecordNotFoundError(PersistenceError):
    def __init__(
        self,
        message: str,
        *,
        code: str | None = NO_ROWS_ERROR_CODE,
        details: str | None = None,
        hint: str | None = None,
        status_code: int = 404,
    ) -> None:
        super().__init__(message, code=code, details=details, hint=hint, status_code=status_code)


class SupabaseClient:
    """
    PostgREST client for the hosted database.

    Requests carry the public key plus the caller's bearer token so that row
    level security policies decide what is visible; no authorization is done
    here.
    """

    def __init__(
        self,
        *,
        base_url: str,
        anon_key: str,
        access_token: str | None = None,
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._rest_url = f"{base_url.rstrip('/')}/rest/v1"
        self._anon_key = anon_key
        self._access_token = access_token
        self._timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        config: Settings | None = None,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SupabaseClient":
        config = config or settings
        base_url, anon_key = config.require_supabase()
        return cls(
            base_url=base_url,
            anon_key=anon_key,
            access_token=access_token,
            timeout=config.SUPABASE_REQUEST_TIMEOUT_SECONDS,
            transport=transport,
        )

    def _headers(self, *, single: bool = False, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self._anon_key,
            "Authorization": f"Bearer {self._access_token or self._anon_key}",
            "Content-Type": "application/json",
            "Accept": "application/vnd.pgrst.object+json" if single else "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, str] | None = None,
        order: str | None = None,
        limit: int | None = None,
        extra_params: dict[str, str] | None = None,
        single: bool = False,
    ) -> Any:
        params: dict[str, str] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = value
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = str(limit)
        if extra_params:
            params.update(extra_params)
        return await self._request("GET", table, params=params, headers=self._headers(single=single))

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        body = await self._request(
            "POST",
            table,
            json=row,
            headers=self._headers(single=True, prefer="return=representation"),
        )
        if not isinstance(body, dict):
            raise PersistenceError(f"Insert into {table} returned no row")
        return body

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        url = f"{self._rest_url}/{table}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, params=params, json=json, headers=headers)
        except httpx.RequestError as exc:
            raise PersistenceError(f"Network error while calling the database: {exc}", status_code=502) from exc

        if response.status_code >= 400:
            raise self._error_from_response(response, table=table)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise PersistenceError("Database returned invalid JSON") from exc

    @staticmethod
    def _error_from_response(response: httpx.Response, *, table: str) -> PersistenceError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = str(body.get("message") or response.text or f"Database request failed ({response.status_code})")
        code = body.get("code")
        details = body.get("details")
        hint = body.get("hint")
        logger.warning(
            "Database request failed",
            extra={
                "table": table,
                "status_code": response.status_code,
                "code": code,
                "db_message": message,
                "details": details,
                "hint": hint,
            },
        )
        if code == NO_ROWS_ERROR_CODE:
            return RecordNotFoundError(message, code=code, details=details, hint=hint)
        return PersistenceError(
            message,
            code=str(code) if code is not None else None,
            details=str(details) if details is not None else None,
            hint=str(hint) if hint is not None else None,
        )
