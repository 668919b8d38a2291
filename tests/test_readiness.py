"""Unit tests for witness/readiness.py: no real daemons or APIs."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx
from httpx import Response

from config.config_loader import DefaultsConfig
from witness.models import ProviderDescriptor
from witness.readiness import probe_all, probe_readiness, registry_has_model
from witness.transports.base import AuthError, TransportError
from witness.transports.openai_chat import OpenAIChatTransport


def _registry_transport(models: list[str]) -> MagicMock:
    transport = MagicMock()
    transport.list_models = AsyncMock(return_value=models)
    return transport


def test_registry_exact_match():
    assert registry_has_model(["llava:latest", "llama3:8b"], "llama3:8b")


def test_registry_prefix_before_colon_match():
    assert registry_has_model(["llama3:8b"], "llama3")


def test_registry_no_match():
    assert not registry_has_model(["llama3:8b"], "mistral")


def test_registry_prefix_is_whole_name_only():
    assert not registry_has_model(["llama3:8b"], "llama")


def test_registry_empty_model_name():
    assert not registry_has_model(["llama3:8b"], "")


async def test_local_ready_on_prefix_match(local_provider):
    status = await probe_readiness(local_provider, transport=_registry_transport(["llama3:8b"]))
    assert status.ready is True
    assert status.provider is local_provider


async def test_local_not_ready_when_model_missing():
    provider = ProviderDescriptor(name="Ollama", kind="local-daemon", vision_model="mistral")
    status = await probe_readiness(provider, transport=_registry_transport(["llama3:8b"]))
    assert status.ready is False
    assert status.message == "not ready"


async def test_local_empty_registry_not_ready(local_provider):
    status = await probe_readiness(local_provider, transport=_registry_transport([]))
    assert status.ready is False
    assert "empty" in status.message


async def test_local_unreachable_daemon_reports_error(local_provider, sample_defaults_config):
    with respx.mock() as respx_mock:
        respx_mock.get("http://ollama.test/api/tags").mock(side_effect=httpx.ConnectError("connection refused"))
        status = await probe_readiness(local_provider, sample_defaults_config)
    assert status.ready is False
    assert "connection refused" in status.message
    assert status.message != "not ready"


async def test_local_probe_over_http(local_provider, sample_defaults_config):
    with respx.mock(assert_all_called=True) as respx_mock:
        respx_mock.get("http://ollama.test/api/tags").mock(
            return_value=Response(200, json={"models": [{"name": "llama3:8b", "size": 1}]})
        )
        status = await probe_readiness(local_provider, sample_defaults_config)
    assert status.ready is True
    assert status.message == "Ollama is running"


async def test_remote_ready_without_model_name_match(remote_provider):
    # Remote readiness is reachability only; the configured gpt-4o is not in this list.
    status = await probe_readiness(remote_provider, transport=_registry_transport(["text-embedding-3-small"]))
    assert status.ready is True


async def test_remote_ready_through_sdk_listing(remote_provider, sample_defaults_config):
    transport = OpenAIChatTransport(remote_provider, sample_defaults_config)
    transport._client = MagicMock()
    transport._client.models.list = AsyncMock(return_value=SimpleNamespace(data=[SimpleNamespace(id="whisper-1")]))
    status = await probe_readiness(remote_provider, transport=transport)
    assert status.ready is True


async def test_remote_empty_listing_not_ready(remote_provider):
    status = await probe_readiness(remote_provider, transport=_registry_transport([]))
    assert status.ready is False


async def test_remote_error_text_in_message(remote_provider):
    transport = MagicMock()
    transport.list_models = AsyncMock(side_effect=TransportError("OpenAI", "503 Service Unavailable"))
    status = await probe_readiness(remote_provider, transport=transport)
    assert status.ready is False
    assert "503" in status.message


async def test_remote_missing_token_not_ready(sample_defaults_config):
    provider = ProviderDescriptor(name="OpenAI", kind="remote-api", vision_model="gpt-4o")
    status = await probe_readiness(provider, sample_defaults_config)
    assert status.ready is False
    assert "Missing auth token" in status.message


async def test_remote_auth_error_not_ready(remote_provider):
    transport = MagicMock()
    transport.list_models = AsyncMock(side_effect=AuthError("OpenAI", "Token rejected"))
    status = await probe_readiness(remote_provider, transport=transport)
    assert status.ready is False


async def test_unsupported_kind_not_ready():
    provider = ProviderDescriptor(name="Mystery", kind="telepathy")
    status = await probe_readiness(provider)
    assert status.ready is False
    assert "telepathy" in status.message


async def test_probe_all_keys_by_name(local_provider, sample_defaults_config):
    unsupported = ProviderDescriptor(name="Mystery", kind="telepathy")
    with respx.mock() as respx_mock:
        respx_mock.get("http://ollama.test/api/tags").mock(
            return_value=Response(200, json={"models": [{"name": "llama3:latest"}]})
        )
        results = await probe_all([local_provider, unsupported], sample_defaults_config)
    assert results["Ollama"].ready is True
    assert results["Mystery"].ready is False


async def test_probe_all_empty():
    assert await probe_all([]) == {}


async def test_probe_all_timeout_counts_as_not_ready(local_provider, monkeypatch):
    async def hang(*args, **kwargs):
        await asyncio.sleep(9999)

    monkeypatch.setattr("witness.readiness.probe_readiness", hang)
    results = await probe_all([local_provider], DefaultsConfig(probe_timeout_sec=0.05))
    assert results["Ollama"].ready is False
    assert "timed out" in results["Ollama"].message


async def test_local_null_registry_not_ready(local_provider, sample_defaults_config):
    with respx.mock() as respx_mock:
        respx_mock.get("http://ollama.test/api/tags").mock(return_value=Response(200, json={"models": None}))
        status = await probe_readiness(local_provider, sample_defaults_config)
    assert status.ready is False
    assert "Unexpected registry payload" in status.message


async def test_probe_all_survives_malformed_registry(local_provider, sample_defaults_config):
    with respx.mock() as respx_mock:
        respx_mock.get("http://ollama.test/api/tags").mock(return_value=Response(200, json=["llama3"]))
        results = await probe_all([local_provider], sample_defaults_config)
    assert results["Ollama"].ready is False
    assert results["Ollama"].message.startswith("Ollama error")


async def test_unexpected_listing_failure_not_ready(local_provider):
    transport = MagicMock()
    transport.list_models = AsyncMock(side_effect=KeyError("name"))
    status = await probe_readiness(local_provider, transport=transport)
    assert status.ready is False
    assert "name" in status.message


async def test_probe_all_rejects_duplicate_names(local_provider):
    with pytest.raises(ValueError, match="Ollama"):
        await probe_all([local_provider, local_provider])
