"""OpenAI-compatible chat completions transport (OpenAI, DeepSeek, custom base_url)."""

import asyncio
import logging
import time

import openai
from openai import AsyncOpenAI

from config.config_loader import DefaultsConfig
from witness.models import ChatTurn, ProviderDescriptor
from witness.transports.base import AuthError, ChatTransport, EmptyResponse, TransportError

logger = logging.getLogger(__name__)


class OpenAIChatTransport(ChatTransport):
    """Remote chat via the openai SDK. The client is built on first use."""

    def __init__(self, provider: ProviderDescriptor, defaults: DefaultsConfig) -> None:
        super().__init__(provider)
        self._defaults = defaults
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            token = (self._provider.auth_token or "").strip()
            if not token:
                raise AuthError(self.name(), "Missing auth token")
            self._client = AsyncOpenAI(api_key=token, base_url=self._provider.endpoint_url or None)
        return self._client

    async def send(self, turns: list[ChatTurn]) -> str:
        client = self._get_client()
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model_string(),
                    messages=[t.as_message() for t in turns],
                    max_tokens=self._defaults.max_tokens,
                ),
                timeout=self._defaults.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Request timed out after {self._defaults.timeout_sec}s") from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthError(self.name(), f"Token rejected: {exc}") from exc
        except Exception as exc:
            raise TransportError(self.name(), f"API call failed: {exc}") from exc

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise EmptyResponse(self.name(), "Empty response content")

        logger.info(
            "%s chat (%d turns): %.2fs",
            self.name(),
            len(turns),
            time.monotonic() - start,
        )
        return choice.message.content

    async def list_models(self) -> list[str]:
        client = self._get_client()
        try:
            page = await asyncio.wait_for(client.models.list(), timeout=self._defaults.probe_timeout_sec)
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Model listing timed out after {self._defaults.probe_timeout_sec}s") from exc
        except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
            raise AuthError(self.name(), f"Token rejected: {exc}") from exc
        except Exception as exc:
            raise TransportError(self.name(), f"Model listing failed: {exc}") from exc
        return [m.id for m in page.data]
