"""
Cliente mínimo do PostgREST (REST do Supabase) sobre requests.

O cliente recebe settings e sessão explicitamente; não há cliente global.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Sequence

import requests

from .config import SupabaseSettings
from .errors import PersistenceError
from .http_client import get_session

logger = logging.getLogger(__name__)

Params = Sequence[tuple[str, str]]


def _error_message(r: requests.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return (r.text or "").strip()[:300]
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or body)
    return str(body)[:300]


def parse_content_range(value: Optional[str]) -> Optional[int]:
    """'0-24/3268760' ou '*/0' -> total; '*' ou ausente -> None."""
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def pg_array(values: Iterable[int]) -> str:
    return "{" + ",".join(str(int(v)) for v in values) + "}"


def pg_in(values: Iterable[Any]) -> str:
    return "in.(" + ",".join(str(v) for v in values) + ")"


class PostgrestClient:
    def __init__(self, settings: SupabaseSettings, session: Optional[requests.Session] = None):
        self.settings = settings
        self.session = session or get_session()

    def _headers(self, extra: Optional[dict[str, str]] = None) -> dict[str, str]:
        h = {
            "apikey": self.settings.service_key,
            "Authorization": f"Bearer {self.settings.service_key}",
            "Content-Type": "application/json",
        }
        if extra:
            h.update(extra)
        return h

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Params] = None,
        json: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> requests.Response:
        url = f"{self.settings.rest_url}/{path.lstrip('/')}"
        try:
            r = self.session.request(
                method,
                url,
                params=list(params) if params else None,
                json=json,
                headers=self._headers(headers),
                timeout=self.settings.timeout,
            )
        except requests.RequestException as e:
            raise PersistenceError(f"{method} {path}: {e}") from e

        if not r.ok:
            raise PersistenceError(
                f"HTTP {r.status_code} em {method} {path}: {_error_message(r)}",
                status=r.status_code,
            )
        return r

    def table(self, name: str) -> "Table":
        return Table(self, name)

    def rpc(self, fn: str, payload: dict[str, Any]) -> Any:
        r = self.request("POST", f"rpc/{fn}", json=payload)
        return r.json() if r.content else None


class Table:
    """Uma tabela/view do PostgREST. Serve de destino (sink) da importação."""

    def __init__(self, client: PostgrestClient, name: str):
        self.client = client
        self.name = name

    def __repr__(self) -> str:
        return f"Table({self.name!r})"

    def probe(self) -> None:
        # levanta PersistenceError se a tabela não existir / não estiver acessível
        self.client.request("GET", self.name, params=[("select", "id"), ("limit", "1")])

    def count(self, params: Optional[Params] = None) -> Optional[int]:
        r = self.client.request(
            "HEAD",
            self.name,
            params=[("select", "*"), *(params or [])],
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range(r.headers.get("Content-Range"))

    def delete_all(self) -> None:
        self.client.request(
            "DELETE", self.name, params=[("id", "neq.0")], headers={"Prefer": "return=minimal"}
        )

    def insert(self, records: Sequence[dict[str, Any]]) -> None:
        self.client.request(
            "POST", self.name, json=list(records), headers={"Prefer": "return=minimal"}
        )

    def upsert(self, rows: Sequence[dict[str, Any]], on_conflict: str) -> None:
        self.client.request(
            "POST",
            self.name,
            params=[("on_conflict", on_conflict)],
            json=list(rows),
            headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
        )

    def select(
        self,
        columns: str = "*",
        params: Optional[Params] = None,
        *,
        order: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        count: bool = False,
    ) -> tuple[list[dict[str, Any]], Optional[int]]:
        q: list[tuple[str, str]] = [("select", columns), *(params or [])]
        if order:
            q.append(("order", order))
        if limit is not None:
            q.append(("limit", str(limit)))
        if offset:
            q.append(("offset", str(offset)))

        r = self.client.request("GET", self.name, params=q, headers={"Prefer": "count=exact"} if count else None)
        rows = r.json() or []
        total = parse_content_range(r.headers.get("Content-Range")) if count else None
        return rows, total
