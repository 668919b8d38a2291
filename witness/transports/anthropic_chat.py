"""Anthropic messages transport using the anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import DefaultsConfig
from witness.models import ChatTurn, ProviderDescriptor
from witness.transports.base import AuthError, ChatTransport, EmptyResponse, TransportError

logger = logging.getLogger(__name__)


class AnthropicChatTransport(ChatTransport):
    """Anthropic Claude chat via the anthropic SDK."""

    def __init__(self, provider: ProviderDescriptor, defaults: DefaultsConfig) -> None:
        super().__init__(provider)
        self._defaults = defaults
        self._client: anthropic_sdk.AsyncAnthropic | None = None

    def _get_client(self) -> anthropic_sdk.AsyncAnthropic:
        if self._client is None:
            token = (self._provider.auth_token or "").strip()
            if not token:
                raise AuthError(self.name(), "Missing auth token")
            kwargs = {"api_key": token}
            if self._provider.endpoint_url:
                kwargs["base_url"] = self._provider.endpoint_url
            self._client = anthropic_sdk.AsyncAnthropic(**kwargs)
        return self._client

    async def send(self, turns: list[ChatTurn]) -> str:
        client = self._get_client()
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.messages.create(
                    model=self.model_string(),
                    max_tokens=self._defaults.max_tokens,
                    messages=[t.as_message() for t in turns],
                ),
                timeout=self._defaults.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Request timed out after {self._defaults.timeout_sec}s") from exc
        except (anthropic_sdk.AuthenticationError, anthropic_sdk.PermissionDeniedError) as exc:
            raise AuthError(self.name(), f"Token rejected: {exc}") from exc
        except Exception as exc:
            raise TransportError(self.name(), f"API call failed: {exc}") from exc

        text_blocks = [b.text for b in (response.content or []) if b.type == "text"]
        content = "\n".join(text_blocks)
        if not content:
            raise EmptyResponse(self.name(), "No text blocks in response")

        logger.info(
            "%s chat (%d turns): %.2fs",
            self.name(),
            len(turns),
            time.monotonic() - start,
        )
        return content

    async def list_models(self) -> list[str]:
        client = self._get_client()
        try:
            page = await asyncio.wait_for(client.models.list(), timeout=self._defaults.probe_timeout_sec)
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Model listing timed out after {self._defaults.probe_timeout_sec}s") from exc
        except (anthropic_sdk.AuthenticationError, anthropic_sdk.PermissionDeniedError) as exc:
            raise AuthError(self.name(), f"Token rejected: {exc}") from exc
        except Exception as exc:
            raise TransportError(self.name(), f"Model listing failed: {exc}") from exc
        return [m.id for m in page.data]
