"""Shared pytest fixtures."""

import asyncio
from pathlib import Path

import pytest

from config.config_loader import AppConfig, DefaultsConfig, GameServerConfig, PromptsConfig
from witness.game_service import StaticGameService
from witness.models import ChatTurn, ProviderDescriptor, Question


@pytest.fixture
def local_provider() -> ProviderDescriptor:
    return ProviderDescriptor(
        name="Ollama",
        kind="local-daemon",
        chat_model="llama3",
        vision_model="llama3",
        endpoint_url="http://ollama.test",
    )


@pytest.fixture
def remote_provider() -> ProviderDescriptor:
    return ProviderDescriptor(
        name="OpenAI",
        kind="remote-api",
        chat_model="gpt-4o-mini",
        vision_model="gpt-4o",
        auth_token="sk-test",
    )


@pytest.fixture
def sample_defaults_config() -> DefaultsConfig:
    return DefaultsConfig(active_provider="Ollama", timeout_sec=5, max_tokens=64, probe_timeout_sec=2.0)


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        reflection="Witness. Q: {question}\nD: {description}",
        decision="Answer YES or NO.",
    )


@pytest.fixture
def sample_app_config(
    sample_defaults_config: DefaultsConfig,
    sample_prompts_config: PromptsConfig,
    local_provider: ProviderDescriptor,
    remote_provider: ProviderDescriptor,
) -> AppConfig:
    return AppConfig(
        defaults=sample_defaults_config,
        providers={"Ollama": local_provider, "OpenAI": remote_provider},
        prompts=sample_prompts_config,
        game_server=GameServerConfig(url="http://game.test", timeout_sec=5.0),
        available_providers={"Ollama", "OpenAI"},
    )


@pytest.fixture
def sample_question() -> Question:
    return Question(english="Does the perpetrator wear glasses?", czech="Nosí pachatel brýle?", topic="looks", level=1)


@pytest.fixture
def game_service() -> StaticGameService:
    return StaticGameService({
        "suspect-1": ["Tall man with round glasses.", "Also, a grey beard."],
        "suspect-2": ["Young woman, red scarf."],
    })


class StubTransport:
    """Scripted send(): returns the replies in order and records every conversation."""

    def __init__(self, *replies: str, latency: float = 0.0) -> None:
        self._replies = list(replies)
        self.latency = latency
        self.calls: list[list[ChatTurn]] = []

    async def send(self, turns: list[ChatTurn]) -> str:
        self.calls.append(list(turns))
        if self.latency:
            await asyncio.sleep(self.latency)
        return self._replies[len(self.calls) - 1]


@pytest.fixture
def stub_transport() -> StubTransport:
    return StubTransport("He leans towards yes, the glasses are prominent.", "YES")


@pytest.fixture
def settings_file(tmp_path: Path) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(
        """
defaults:
  active_provider: Ollama
  timeout_sec: 5
providers:
  Ollama:
    kind: local-daemon
    chat_model: llama3
    vision_model: llama3
    url: http://ollama.test
  OpenAI:
    kind: remote-api
    vision_model: gpt-4o
    token: sk-test
game_server:
  url: http://game.test
""",
        encoding="utf-8",
    )
    return path
