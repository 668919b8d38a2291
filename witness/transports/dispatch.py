"""Pick the chat transport for a provider descriptor."""

from config.config_loader import DefaultsConfig
from witness.models import LOCAL_DAEMON, REMOTE_API, ProviderDescriptor
from witness.transports.anthropic_chat import AnthropicChatTransport
from witness.transports.base import ChatTransport, UnsupportedProvider
from witness.transports.gemini_chat import GeminiChatTransport
from witness.transports.kinds import normalize_kind, remote_flavor
from witness.transports.ollama_chat import OllamaChatTransport
from witness.transports.openai_chat import OpenAIChatTransport

REMOTE_TRANSPORTS: dict[str, type[ChatTransport]] = {
    "openai": OpenAIChatTransport,
    "anthropic": AnthropicChatTransport,
    "gemini": GeminiChatTransport,
}


def build_transport(provider: ProviderDescriptor, defaults: DefaultsConfig | None = None) -> ChatTransport:
    """Return the transport for provider.kind, sub-selected by name for remote APIs.

    Raises:
        UnsupportedProvider: If the kind (or, for a blank kind, the name) is not recognized.
    """
    defaults = defaults or DefaultsConfig()
    kind = normalize_kind(provider)
    if kind == LOCAL_DAEMON:
        return OllamaChatTransport(provider, defaults)
    if kind == REMOTE_API:
        return REMOTE_TRANSPORTS[remote_flavor(provider)](provider, defaults)
    raise UnsupportedProvider(
        provider.name,
        f"Unsupported provider kind {provider.kind!r}",
    )
