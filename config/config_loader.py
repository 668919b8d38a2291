"""Load settings.yaml into typed dataclasses. Resolves provider tokens at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from witness.models import LOCAL_DAEMON, ProviderDescriptor
from witness.transports.kinds import normalize_kind

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

DEFAULT_REFLECTION_PROMPT = """ROLE: You are a player of Unusual Suspects board game - text based version. You are a witness.
TASK: Read the description of the perpetrator and the question the police officer asked you about perpetrator.
Write a short reflection on the perpetrator in relation to the question.
Try to think both ways, both about the positive answer and the negative one, which one you lean more towards. Cca 100 words.
QUESTION: {question}
DESCRIPTION OF PERPETRATOR: {description}"""

DEFAULT_DECISION_PROMPT = """ROLE: You are a senior decision maker.
TASK: Answer the question YES or NO. Do not write anything else. Do not write anything else. Just write YES, or NO based on the previous information."""


@dataclass
class DefaultsConfig:
    active_provider: str = ""
    timeout_sec: int = 120
    max_tokens: int = 1024
    probe_timeout_sec: float = 15.0


@dataclass
class PromptsConfig:
    reflection: str = DEFAULT_REFLECTION_PROMPT
    decision: str = DEFAULT_DECISION_PROMPT


@dataclass
class GameServerConfig:
    url: str = "http://localhost:8080"
    timeout_sec: float = 30.0


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    providers: dict[str, ProviderDescriptor]
    prompts: PromptsConfig = field(default_factory=PromptsConfig)
    game_server: GameServerConfig = field(default_factory=GameServerConfig)
    available_providers: set[str] = field(default_factory=set)

    def active(self, name: str | None = None) -> ProviderDescriptor:
        """Return the named provider, or the configured active one.

        Lookup is case-insensitive. Raises KeyError if nothing matches.
        """
        wanted = (name or self.defaults.active_provider).strip().lower()
        for provider_name, descriptor in self.providers.items():
            if provider_name.lower() == wanted:
                return descriptor
        raise KeyError(f"Provider not configured: {name or self.defaults.active_provider!r}")


def _str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def provider_from_mapping(name: str, raw: dict[str, Any] | None) -> ProviderDescriptor:
    """Build a ProviderDescriptor from one settings entry.

    Unknown keys are ignored and missing keys default to empty. A missing
    token is not an error here; remote adapters raise AuthError at call time.
    """
    raw = raw or {}
    token = _str_or_none(raw.get("token"))
    token_env = _str_or_none(raw.get("token_env"))
    if token is None and token_env:
        token = _str_or_none(os.environ.get(token_env))

    return ProviderDescriptor(
        name=str(raw.get("name") or name),
        kind=str(raw.get("kind") or ""),
        chat_model=str(raw.get("chat_model") or ""),
        vision_model=str(raw.get("vision_model") or ""),
        auth_token=token,
        endpoint_url=_str_or_none(raw.get("url")),
    )


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if two
    providers share a name (compared case-insensitively).
    Logs providers without a token but does not raise; local daemons need
    none and remote ones fail with AuthError only when called.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    defaults_raw = raw.get("defaults") or {}
    defaults = DefaultsConfig(
        active_provider=str(defaults_raw.get("active_provider", "")),
        timeout_sec=int(defaults_raw.get("timeout_sec", 120)),
        max_tokens=int(defaults_raw.get("max_tokens", 1024)),
        probe_timeout_sec=float(defaults_raw.get("probe_timeout_sec", 15.0)),
    )

    prompts_raw = raw.get("prompts") or {}
    prompts = PromptsConfig(
        reflection=prompts_raw.get("reflection", DEFAULT_REFLECTION_PROMPT),
        decision=prompts_raw.get("decision", DEFAULT_DECISION_PROMPT),
    )

    server_raw = raw.get("game_server") or {}
    game_server = GameServerConfig(
        url=str(server_raw.get("url", "http://localhost:8080")),
        timeout_sec=float(server_raw.get("timeout_sec", 30.0)),
    )

    providers: dict[str, ProviderDescriptor] = {}
    available_providers: set[str] = set()

    for provider_name, provider_raw in (raw.get("providers") or {}).items():
        descriptor = provider_from_mapping(provider_name, provider_raw)
        if any(existing.lower() == descriptor.name.lower() for existing in providers):
            raise ValueError(f"Duplicate provider name in {settings_path}: {descriptor.name!r}")
        providers[descriptor.name] = descriptor

        if descriptor.auth_token or normalize_kind(descriptor) == LOCAL_DAEMON:
            available_providers.add(descriptor.name)
            logger.info("Provider available: %s", descriptor.name)
        else:
            logger.info(
                "Provider has no token: %s (set %s in .env)",
                descriptor.name,
                (provider_raw or {}).get("token_env", "a token"),
            )

    return AppConfig(
        defaults=defaults,
        providers=providers,
        prompts=prompts,
        game_server=game_server,
        available_providers=available_providers,
    )
