"""Thin async client for the Airtable REST api.

Every call is one (or, for listing, several sequential) http requests. No
caching, no retries. Anything that goes wrong comes back as a `StoreError`.
"""
from enum import Enum
import logging
from typing import Any, TypeAlias, TypeVar

import httpx

from frigo.errors import StoreError


logger = logging.getLogger(__name__)


AIRTABLE_URL = "https://api.airtable.com/v0/"
TIMEOUT = 60 * 2
# Airtable refuses more than ten records per write.
BATCH_SIZE = 10


Record: TypeAlias = dict[str, Any]
Fields: TypeAlias = dict[str, Any]
Sort: TypeAlias = list[tuple[str, str]]

T = TypeVar("T")


class Table(Enum):
    ingredients = "Ingredients"
    recipes = "Recipes"
    joins = "Recipe-Ingredient-Join"
    instructions = "Recipe-Instructions"


def airtable_client_factory(
    base_id: str,
    token: str,
    *,
    base_url: str = AIRTABLE_URL,
    timeout: float = TIMEOUT,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=f"{base_url.rstrip('/')}/{base_id}/",
        headers={
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        },
        timeout=timeout,
    )


def _chunks(items: list[T], size: int = BATCH_SIZE) -> list[list[T]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return f"Airtable responded {resp.status_code}: {resp.text[:200]}"
    error = body.get("error") if isinstance(body, dict) else None
    match error:
        case {"type": kind, "message": message}:
            return f"{kind}: {message}"
        case {"type": kind}:
            return str(kind)
        case str():
            return error
        case _:
            return f"Airtable responded {resp.status_code}"


def _records(data: Any) -> list[Record]:
    if not isinstance(data, dict) or not isinstance(data.get("records"), list):
        raise StoreError(f"Airtable answered without a records list: {data!r:.200}")
    return data["records"]


class RecordStore:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("%s %s %s", method, path, kwargs.get("params") or "")
        try:
            resp = await self.client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                _error_message(e.response), store_status=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {path} failed: {e!r}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(
                f"{method} {path} answered with a body that is not JSON",
                store_status=resp.status_code,
            ) from e

    async def get(self, table: Table, id: str) -> Record:
        return await self._request("GET", f"{table.value}/{id}")

    async def create(self, table: Table, fields: Fields) -> Record:
        return await self._request("POST", table.value, json={"fields": fields})

    async def create_many(self, table: Table, fields_list: list[Fields]) -> list[Record]:
        created: list[Record] = []
        for chunk in _chunks(fields_list):
            data = await self._request(
                "POST",
                table.value,
                json={"records": [{"fields": fields} for fields in chunk]},
            )
            created.extend(_records(data))
        return created

    async def update(self, table: Table, id: str, fields: Fields) -> Record:
        """Partial update, only the given fields change."""
        return await self._request(
            "PATCH", f"{table.value}/{id}", json={"fields": fields}
        )

    async def delete(self, table: Table, id: str) -> Record:
        return await self._request("DELETE", f"{table.value}/{id}")

    async def delete_many(self, table: Table, ids: list[str]) -> list[Record]:
        deleted: list[Record] = []
        for chunk in _chunks(ids):
            data = await self._request(
                "DELETE", table.value, params={"records[]": chunk}
            )
            deleted.extend(_records(data))
        return deleted

    async def list(
        self,
        table: Table,
        *,
        sort: Sort | None = None,
        filter_by_formula: str | None = None,
        max_records: int | None = None,
        page_size: int | None = None,
        view: str | None = None,
    ) -> list[Record]:
        """Every record of `table`, following the offset cursor page by page."""
        params: dict[str, str | int] = {}
        if view:
            params["view"] = view
        if filter_by_formula:
            params["filterByFormula"] = filter_by_formula
        if max_records is not None:
            params["maxRecords"] = max_records
        if page_size is not None:
            params["pageSize"] = page_size
        for i, (field, direction) in enumerate(sort or []):
            params[f"sort[{i}][field]"] = field
            params[f"sort[{i}][direction]"] = direction

        records: list[Record] = []
        offset: str | None = None
        while True:
            page_params = params if offset is None else {**params, "offset": offset}
            data = await self._request("GET", table.value, params=page_params)
            records.extend(_records(data))
            if max_records is not None and len(records) >= max_records:
                return records[:max_records]
            offset = data.get("offset")
            if not offset:
                return records
