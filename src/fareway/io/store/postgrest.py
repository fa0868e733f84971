"""PostgREST (Supabase REST) record store over httpx.

Query mapping:
    select(table, filters=[Filter.ilike("region", "kerry")], order_by="rating",
           descending=True, limit=20)
    -> GET {url}/rest/v1/{table}?select=*&region=ilike.*kerry*&order=rating.desc&limit=20

The httpx client is created lazily on first use and shared by all concurrent
calls; every request is bounded by the client timeout or a tighter per-call
deadline.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

import httpx

from fareway.foundation.errors import ErrorCode, RecordNotFound, StoreError
from fareway.runtime.observability import get_logger

from .store import Filter, Row

if TYPE_CHECKING:
    from fareway.foundation.config import StoreSettings

log = get_logger("store.postgrest")

APPLICATION_HEADER = "fareway-database-mcp"


def render_filter(f: Filter) -> tuple[str, str]:
    """Render one filter as a PostgREST query parameter."""
    value = "true" if f.value is True else "false" if f.value is False else str(f.value)
    if f.op == "ilike":
        return f.field, f"ilike.*{value}*"
    return f.field, f"{f.op}.{value}"


class PostgrestStore:
    """Read-only PostgREST client.

    Args:
        base_url: Project URL (``/rest/v1`` is appended)
        service_key: Key sent as ``apikey`` and bearer token
        schema: Database schema selected via Accept-Profile
        timeout: Default per-request timeout in seconds
        probe_table: Table read by ``ping()``
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)

    Example:
        >>> store = PostgrestStore("https://xyz.supabase.co", "service-key")
        >>> rows = await store.select("golf_courses", filters=[Filter.eq("course_type", "links")])
    """

    __slots__ = ("_base_url", "_headers", "_timeout", "_probe_table", "_transport", "_client")

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        schema: str = "public",
        timeout: float = 5.0,
        probe_table: str = "golf_courses",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = f"{base_url.rstrip('/')}/rest/v1"
        self._headers = {
            "apikey": service_key,
            "Authorization": f"Bearer {service_key}",
            "Accept": "application/json",
            "Accept-Profile": schema,
            "x-application": APPLICATION_HEADER,
        }
        self._timeout = timeout
        self._probe_table = probe_table
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(cls, settings: StoreSettings, **kwargs: Any) -> PostgrestStore:
        return cls(
            str(settings.url),
            settings.service_key.get_secret_value(),
            schema=settings.schema_name,
            timeout=settings.timeout,
            probe_table=settings.probe_table,
            **kwargs,
        )

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared httpx client."""
        if self._client is None:
            log.info("initializing store client", url=self._base_url)
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("store connections closed")

    def _effective_timeout(self, timeout: float | None) -> float:
        return self._timeout if timeout is None else max(0.001, min(timeout, self._timeout))

    async def _get(self, table: str, params: list[tuple[str, str]], timeout: float | None) -> list[Row]:
        try:
            response = await self._get_client().get(f"/{table}", params=params, timeout=self._effective_timeout(timeout))
        except httpx.TimeoutException as e:
            raise StoreError(f"Database timeout querying {table}", ErrorCode.TIMEOUT) from e
        except httpx.HTTPError as e:
            raise StoreError(f"Database unreachable: {e}", ErrorCode.NETWORK_ERROR) from e

        if response.status_code >= 400:
            raise StoreError(f"Database error: {_error_message(response)}")
        try:
            body = response.json()
        except ValueError as e:
            raise StoreError(f"Database error: invalid JSON from {table}") from e
        if not isinstance(body, list):
            raise StoreError(f"Database error: expected rows from {table}")
        return body

    async def select(
        self,
        table: str,
        *,
        columns: Sequence[str] = ("*",),
        filters: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> list[Row]:
        params = [("select", ",".join(columns))]
        params += [render_filter(f) for f in filters]
        if order_by is not None:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        return await self._get(table, params, timeout)

    async def select_one(
        self,
        table: str,
        record_id: str,
        *,
        columns: Sequence[str] = ("*",),
        timeout: float | None = None,
    ) -> Row:
        rows = await self._get(
            table,
            [("select", ",".join(columns)), ("id", f"eq.{record_id}"), ("limit", "1")],
            timeout,
        )
        if not rows:
            raise RecordNotFound(f"{table} record {record_id} not found")
        return rows[0]

    async def ping(self, *, timeout: float | None = None) -> bool:
        """Connectivity probe: read one id from the probe table."""
        try:
            await self.select(self._probe_table, columns=("id",), limit=1, timeout=timeout)
        except StoreError as e:
            log.error("database connection test failed", error=e.message)
            return False
        return True


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
