"""Gemini transport using google-genai SDK with native async."""

import asyncio
import logging
import time

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from config.config_loader import DefaultsConfig
from witness.models import ChatTurn, ProviderDescriptor
from witness.transports.base import AuthError, ChatTransport, EmptyResponse, TransportError

logger = logging.getLogger(__name__)

# Gemini names the assistant side of a conversation "model".
_ROLES = {"user": "user", "assistant": "model"}


def _to_contents(turns: list[ChatTurn]) -> list[genai_types.Content]:
    return [
        genai_types.Content(role=_ROLES[t.role], parts=[genai_types.Part(text=t.content)])
        for t in turns
    ]


def _is_auth_failure(exc: Exception) -> bool:
    return isinstance(exc, genai_errors.ClientError) and getattr(exc, "code", None) in (401, 403)


class GeminiChatTransport(ChatTransport):
    """Google Gemini chat via google-genai SDK."""

    def __init__(self, provider: ProviderDescriptor, defaults: DefaultsConfig) -> None:
        super().__init__(provider)
        self._defaults = defaults
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            token = (self._provider.auth_token or "").strip()
            if not token:
                raise AuthError(self.name(), "Missing auth token")
            http_options = None
            if self._provider.endpoint_url:
                http_options = genai_types.HttpOptions(base_url=self._provider.endpoint_url)
            self._client = genai.Client(api_key=token, http_options=http_options)
        return self._client

    async def send(self, turns: list[ChatTurn]) -> str:
        client = self._get_client()
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model_string(),
                    contents=_to_contents(turns),
                    config=genai_types.GenerateContentConfig(
                        max_output_tokens=self._defaults.max_tokens,
                    ),
                ),
                timeout=self._defaults.timeout_sec,
            )
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Request timed out after {self._defaults.timeout_sec}s") from exc
        except Exception as exc:
            if _is_auth_failure(exc):
                raise AuthError(self.name(), f"Token rejected: {exc}") from exc
            raise TransportError(self.name(), f"API call failed: {exc}") from exc

        if not response.text:
            raise EmptyResponse(self.name(), "Empty response text")

        logger.info(
            "%s chat (%d turns): %.2fs",
            self.name(),
            len(turns),
            time.monotonic() - start,
        )
        return response.text

    async def list_models(self) -> list[str]:
        client = self._get_client()

        async def _collect() -> list[str]:
            pager = await client.aio.models.list()
            return [m.name async for m in pager]

        try:
            return await asyncio.wait_for(_collect(), timeout=self._defaults.probe_timeout_sec)
        except TimeoutError as exc:
            raise TransportError(self.name(), f"Model listing timed out after {self._defaults.probe_timeout_sec}s") from exc
        except Exception as exc:
            if _is_auth_failure(exc):
                raise AuthError(self.name(), f"Token rejected: {exc}") from exc
            raise TransportError(self.name(), f"Model listing failed: {exc}") from exc
