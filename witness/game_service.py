"""Game server collaborator: suspect descriptions in, answers and failures out."""

import logging
from abc import ABC, abstractmethod

import httpx

logger = logging.getLogger(__name__)


class GameServiceError(Exception):
    """Raised when the game server rejects or fails a request."""


class GameService(ABC):
    """What the answer orchestrator needs from the game server."""

    @abstractmethod
    async def get_suspect_description(
        self, suspect_id: str, provider_name: str, vision_model: str
    ) -> list[str]:
        """Return the suspect's description fragments in generation order.

        May be empty.
        """
        ...

    @abstractmethod
    async def record_failed_answer(self, reason: str, interrogation_id: str) -> None:
        ...

    @abstractmethod
    async def save_answer(self, text: str, round_id: str) -> None:
        ...


def _fragment_text(item: object) -> str:
    # The server lists either plain strings or Description records.
    if isinstance(item, dict):
        return str(item.get("Description", item.get("description", "")))
    return str(item)


class HttpGameService(GameService):
    """GameService backed by the game server's HTTP endpoints."""

    def __init__(self, base_url: str, timeout_sec: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_sec = timeout_sec

    async def _request(self, method: str, path: str, params: dict[str, str]) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_sec) as client:
                resp = await client.request(method, f"{self.base_url}{path}", params=params)
                resp.raise_for_status()
                return resp
        except httpx.HTTPError as exc:
            raise GameServiceError(f"{method} {path} failed: {exc}") from exc

    async def get_suspect_description(
        self, suspect_id: str, provider_name: str, vision_model: str
    ) -> list[str]:
        resp = await self._request(
            "GET",
            "/get_descriptions",
            {"suspect_uuid": suspect_id, "service": provider_name, "model": vision_model},
        )
        if not resp.content.strip():
            return []
        try:
            items = resp.json()
        except ValueError as exc:
            raise GameServiceError(f"Invalid descriptions payload: {exc}") from exc
        return [_fragment_text(item) for item in (items or [])]

    async def save_answer(self, text: str, round_id: str) -> None:
        await self._request("POST", "/save_answer", {"answer": text, "round_uuid": round_id})

    async def record_failed_answer(self, reason: str, interrogation_id: str) -> None:
        # Failures are stored in the round's answer slot, like any other answer.
        await self.save_answer(reason, interrogation_id)


class StaticGameService(GameService):
    """In-memory GameService for offline use: fixed descriptions, logged results."""

    def __init__(self, descriptions: dict[str, list[str]] | None = None) -> None:
        self.descriptions = descriptions or {}
        self.failures: list[tuple[str, str]] = []
        self.saved: list[tuple[str, str]] = []

    async def get_suspect_description(
        self, suspect_id: str, provider_name: str, vision_model: str
    ) -> list[str]:
        return list(self.descriptions.get(suspect_id, []))

    async def record_failed_answer(self, reason: str, interrogation_id: str) -> None:
        logger.warning("Recorded failure for %s: %s", interrogation_id, reason)
        self.failures.append((reason, interrogation_id))

    async def save_answer(self, text: str, round_id: str) -> None:
        self.saved.append((text, round_id))
