"""Chat transport contract and the provider fault taxonomy."""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from witness.models import ChatTurn, ProviderDescriptor

# The only capability the interrogation protocol needs from a backend.
Send = Callable[[list[ChatTurn]], Awaitable[str]]


class ProviderError(Exception):
    """Raised when a provider cannot produce a usable reply."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class UnsupportedProvider(ProviderError):
    """Provider kind/name not recognized. Configuration fault, not retryable."""


class TransportError(ProviderError):
    """Network, timeout or protocol fault reaching the backend."""


class AuthError(ProviderError):
    """Auth token missing or rejected by a remote backend."""


class EmptyResponse(ProviderError):
    """Backend replied with an envelope that carries no message content."""


class ProtocolError(ProviderError):
    """Interrogation turn produced nothing usable."""


class EmptyReflection(ProtocolError):
    pass


class EmptyDecision(ProtocolError):
    pass


class ChatTransport(ABC):
    """One backend family's wire call behind a uniform chat signature."""

    def __init__(self, provider: ProviderDescriptor) -> None:
        self._provider = provider

    def name(self) -> str:
        return self._provider.name

    def model_string(self) -> str:
        return self._provider.interrogation_model

    @abstractmethod
    async def send(self, turns: list[ChatTurn]) -> str:
        """Send the whole conversation and return the assistant reply text.

        Raises:
            AuthError: Token missing or rejected.
            TransportError: On network failure, timeout or API error.
            EmptyResponse: When the reply has no message content.
        """
        ...

    @abstractmethod
    async def list_models(self) -> list[str]:
        """Return the model identifiers the backend currently offers.

        Raises:
            ProviderError: On any failure reaching the backend.
        """
        ...
