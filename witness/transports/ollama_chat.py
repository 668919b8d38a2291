"""Local Ollama daemon transport over its HTTP API. No authentication."""

import logging
import os
import time

import httpx

from config.config_loader import DefaultsConfig
from witness.models import ChatTurn, ProviderDescriptor
from witness.transports.base import ChatTransport, EmptyResponse, TransportError

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"


def ollama_base_url(provider: ProviderDescriptor) -> str:
    """Descriptor URL, else $OLLAMA_HOST, else the daemon's default port."""
    url = provider.endpoint_url or os.environ.get("OLLAMA_HOST", "").strip() or DEFAULT_OLLAMA_URL
    if "://" not in url:
        url = f"http://{url}"
    return url.rstrip("/")


class OllamaChatTransport(ChatTransport):
    """Chat against a daemon running on this host via /api/chat."""

    def __init__(self, provider: ProviderDescriptor, defaults: DefaultsConfig) -> None:
        super().__init__(provider)
        self._defaults = defaults
        self.base_url = ollama_base_url(provider)

    async def send(self, turns: list[ChatTurn]) -> str:
        payload = {
            "model": self.model_string(),
            "messages": [t.as_message() for t in turns],
            "stream": False,
        }
        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self._defaults.timeout_sec) as client:
                resp = await client.post(f"{self.base_url}/api/chat", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except httpx.TimeoutException as exc:
            raise TransportError(self.name(), f"Request timed out after {self._defaults.timeout_sec}s") from exc
        except httpx.ConnectError as exc:
            raise TransportError(self.name(), f"Daemon not reachable at {self.base_url}: {exc}") from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise TransportError(self.name(), f"API call failed: {exc}") from exc

        content = (data.get("message") or {}).get("content") if isinstance(data, dict) else None
        if not content:
            raise EmptyResponse(self.name(), "Empty response content")

        logger.info(
            "%s chat (%d turns): %.2fs",
            self.name(),
            len(turns),
            time.monotonic() - start,
        )
        return content

    async def list_models(self) -> list[str]:
        """Return installed model identifiers from the daemon registry (/api/tags)."""
        try:
            async with httpx.AsyncClient(timeout=self._defaults.probe_timeout_sec) as client:
                resp = await client.get(f"{self.base_url}/api/tags")
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise TransportError(self.name(), f"Registry not reachable at {self.base_url}: {exc}") from exc
        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list) or not all(isinstance(m, dict) for m in models):
            raise TransportError(self.name(), f"Unexpected registry payload from {self.base_url}/api/tags")
        return [m["name"] for m in models if m.get("name")]
