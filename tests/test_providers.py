from __future__ import annotations

from typing import Any

import aiohttp
import pytest

from pyvault.exceptions import VaultProviderError
from pyvault.models.entry import Entry
from pyvault.providers import EnvProvider, FunctionProvider, HttpProvider, provider_name


class _FakeResponse:
    def __init__(self, status: int, text: str) -> None:
        self.status = status
        self._text = text

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class _FakeSession:
    def __init__(self, status: int = 200, text: str = "[]", error: Exception | None = None) -> None:
        self._status = status
        self._text = text
        self._error = error
        self.requests: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers: dict[str, str]) -> _FakeResponse:
        self.requests.append((url, headers))
        if self._error is not None:
            raise self._error
        return _FakeResponse(self._status, self._text)


# ---------------------------------------------------------------------------
# FunctionProvider
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_function_provider_sync() -> None:
    def load() -> list[Entry]:
        return [Entry(key="k", value="v")]

    provider = FunctionProvider(load)

    entries = await provider.fetch()
    assert [e.key for e in entries] == ["k"]
    assert provider.name == "load"


@pytest.mark.asyncio
async def test_function_provider_async_and_mappings() -> None:
    async def load() -> list[dict[str, str]]:
        return [{"key": "k", "value": "v", "source": "ssm"}]

    provider = FunctionProvider(load, name="ssm")

    entries = await provider.fetch()
    assert entries == [Entry(key="k", value="v", source="ssm")]
    assert provider_name(provider) == "ssm"


@pytest.mark.asyncio
async def test_function_provider_propagates_errors() -> None:
    def load() -> list[Entry]:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await FunctionProvider(load).fetch()


def test_provider_name_falls_back_to_class_name() -> None:
    class Anonymous:
        async def fetch(self) -> list[Entry]:
            return []

    assert provider_name(Anonymous()) == "Anonymous"


# ---------------------------------------------------------------------------
# EnvProvider
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_env_provider_filters_by_prefix() -> None:
    environ = {
        "APP_SECRET_DB_PASSWORD": "hunter2",
        "APP_SECRET_": "ignored",
        "PATH": "/usr/bin",
    }
    provider = EnvProvider("APP_SECRET_", environ=environ)

    entries = await provider.fetch()
    assert entries == [Entry(key="db_password", value="hunter2", source="env")]


@pytest.mark.asyncio
async def test_env_provider_reads_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PYVAULT_TEST_Token", "abc")

    entries = await EnvProvider("PYVAULT_TEST_", lowercase=False).fetch()
    assert [(e.key, e.value) for e in entries] == [("Token", "abc")]


def test_env_provider_requires_prefix() -> None:
    with pytest.raises(ValueError):
        EnvProvider("")


# ---------------------------------------------------------------------------
# HttpProvider
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_http_provider_entry_list() -> None:
    session = _FakeSession(
        text='[{"key": "a", "value": "1"}, {"key": "b", "value": "2", "source": "ssm", "created_at": 0}]'
    )
    provider = HttpProvider(
        "https://config.example.com/entries",
        headers={"authorization": "Bearer t"},
        session=session,  # type: ignore[arg-type]
    )

    entries = await provider.fetch()

    assert entries == [
        Entry(key="a", value="1", source="http"),
        Entry(key="b", value="2", source="ssm"),
    ]
    url, headers = session.requests[0]
    assert url == "https://config.example.com/entries"
    assert headers["authorization"] == "Bearer t"
    assert headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_http_provider_key_value_object() -> None:
    session = _FakeSession(text='{"db-host": "db.internal", "port": 5432}')
    provider = HttpProvider("https://config.example.com", session=session)  # type: ignore[arg-type]

    entries = await provider.fetch()

    assert {(e.key, e.value) for e in entries} == {("db-host", "db.internal"), ("port", "5432")}


@pytest.mark.asyncio
async def test_http_provider_non_200() -> None:
    session = _FakeSession(status=503, text="unavailable")
    provider = HttpProvider("https://config.example.com", session=session, name="cfg")  # type: ignore[arg-type]

    with pytest.raises(VaultProviderError) as excinfo:
        await provider.fetch()

    assert "HTTP 503" in str(excinfo.value)
    assert excinfo.value.provider == "cfg"


@pytest.mark.asyncio
async def test_http_provider_client_error() -> None:
    session = _FakeSession(error=aiohttp.ClientConnectionError("refused"))
    provider = HttpProvider("https://config.example.com", session=session)  # type: ignore[arg-type]

    with pytest.raises(VaultProviderError) as excinfo:
        await provider.fetch()

    assert isinstance(excinfo.value.__cause__, aiohttp.ClientError)


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["not json", '"a string"', '{"nested": {"x": 1}}', "[1, 2]"])
async def test_http_provider_rejects_bad_payloads(body: str) -> None:
    provider = HttpProvider("https://config.example.com", session=_FakeSession(text=body))  # type: ignore[arg-type]

    with pytest.raises(VaultProviderError):
        await provider.fetch()
