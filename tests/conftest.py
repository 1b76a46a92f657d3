from __future__ import annotations

import itertools
import json as jsonlib
from typing import Any, Callable, Optional

import pytest
import requests

from lotofacil_games.config import SupabaseSettings
from lotofacil_games.domain_lottery import format_combination
from lotofacil_games.errors import PersistenceError
from lotofacil_games.supabase_rest import PostgrestClient


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, headers: Optional[dict] = None):
        self.status_code = status_code
        self._payload = payload
        self.headers = headers or {}
        self.text = "" if payload is None else jsonlib.dumps(payload)
        self.content = self.text.encode("utf-8")

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Sessão HTTP falsa: `handler(method, url, params, json)` devolve a resposta."""

    def __init__(self, handler: Callable[..., FakeResponse]):
        self.handler = handler
        self.calls: list[dict[str, Any]] = []

    def request(self, method, url, params=None, json=None, headers=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "params": params or [], "json": json, "headers": headers or {}}
        )
        return self.handler(method, url, params or [], json)

    def get(self, url, timeout=None, **kw):
        return self.request("GET", url, timeout=timeout)


class FakeSink:
    def __init__(self, fail_batches=(), probe_error: Optional[str] = None, delete_error: Optional[str] = None):
        self.fail_batches = set(fail_batches)
        self.probe_error = probe_error
        self.delete_error = delete_error
        self.calls: list[str] = []
        self.batch_sizes: list[int] = []
        self.inserted: list[dict] = []

    def __repr__(self) -> str:
        return "FakeSink()"

    def probe(self) -> None:
        self.calls.append("probe")
        if self.probe_error:
            raise PersistenceError(self.probe_error, status=404)

    def delete_all(self) -> None:
        self.calls.append("delete")
        if self.delete_error:
            raise PersistenceError(self.delete_error, status=500)
        self.inserted.clear()

    def insert(self, records) -> None:
        self.calls.append("insert")
        self.batch_sizes.append(len(records))
        if len(self.batch_sizes) in self.fail_batches:
            raise PersistenceError("HTTP 500 em POST all_possible_games: boom", status=500)
        self.inserted.extend(records)

    def count(self) -> int:
        return len(self.inserted)


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.t = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.t

    def sleep(self, s: float) -> None:
        self.sleeps.append(s)
        self.t += s


def combination_lines(n: int) -> list[str]:
    return [format_combination(c) for c in itertools.islice(itertools.combinations(range(1, 26), 15), n)]


@pytest.fixture
def settings() -> SupabaseSettings:
    return SupabaseSettings(url="https://proj.supabase.co/", service_key="service-key", timeout=5)


@pytest.fixture
def make_client(settings):
    def _make(handler):
        session = FakeSession(handler)
        return PostgrestClient(settings, session=session), session

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
