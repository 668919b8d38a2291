"""Provider kind normalization and remote backend flavor lookup."""

from witness.models import (
    LOCAL_DAEMON,
    LOCAL_DAEMON_ALIASES,
    REMOTE_API,
    REMOTE_API_ALIASES,
    ProviderDescriptor,
)

# Remote flavors keyed by lowercased provider name; unknown names speak the
# OpenAI-compatible chat completions API.
REMOTE_FLAVORS: dict[str, str] = {
    "openai": "openai",
    "deepseek": "openai",
    "anthropic": "anthropic",
    "claude": "anthropic",
    "gemini": "gemini",
    "google": "gemini",
}


def normalize_kind(provider: ProviderDescriptor) -> str | None:
    """Return REMOTE_API, LOCAL_DAEMON, or None when the kind is not recognized.

    A blank kind falls back to the provider name: "ollama" is a local daemon,
    the known hosted names are remote APIs.
    """
    kind = provider.kind.strip().lower()
    if kind in REMOTE_API_ALIASES:
        return REMOTE_API
    if kind in LOCAL_DAEMON_ALIASES:
        return LOCAL_DAEMON
    if kind:
        return None

    name = provider.name.strip().lower()
    if name in LOCAL_DAEMON_ALIASES:
        return LOCAL_DAEMON
    if name in REMOTE_FLAVORS:
        return REMOTE_API
    return None


def remote_flavor(provider: ProviderDescriptor) -> str:
    return REMOTE_FLAVORS.get(provider.name.strip().lower(), "openai")
