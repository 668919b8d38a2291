"""Two-turn reflect-then-decide interrogation, independent of the backend."""

import logging
import re

from config.config_loader import PromptsConfig
from witness.models import ChatTurn
from witness.transports.base import EmptyDecision, EmptyReflection, Send

logger = logging.getLogger(__name__)

_VERDICT_WORD = re.compile(r"[A-Za-z]+")


def build_reflection_prompt(question: str, description: str, prompts: PromptsConfig) -> str:
    return prompts.reflection.format(question=question, description=description)


async def interrogate(
    question: str,
    description: str,
    send: Send,
    prompts: PromptsConfig | None = None,
    provider_name: str = "witness",
) -> str:
    """Ask the witness one question about a described suspect.

    Args:
        question: Primary-language question text.
        description: Joined suspect description.
        send: Transport capability, whole conversation in, reply text out.
        prompts: Reflection/decision templates. Defaults to the built-in ones.
        provider_name: Used only to label raised errors.

    Returns:
        The decision reply exactly as the backend produced it.

    Raises:
        EmptyReflection: If the first turn returns no content.
        EmptyDecision: If the second turn returns no content.
        ProviderError: Whatever the transport raises, unchanged.
    """
    prompts = prompts or PromptsConfig()
    reflection_turn = ChatTurn("user", build_reflection_prompt(question, description, prompts))

    reflection = await send([reflection_turn])
    if not reflection or not reflection.strip():
        raise EmptyReflection(provider_name, "No reflection in reply")
    logger.debug("Reflection from %s: %s", provider_name, reflection)

    decision = await send([
        reflection_turn,
        ChatTurn("assistant", reflection),
        ChatTurn("user", prompts.decision),
    ])
    if not decision or not decision.strip():
        raise EmptyDecision(provider_name, "No decision in reply")
    logger.info("Decision from %s: %s", provider_name, decision)

    return decision


def parse_verdict(text: str) -> bool | None:
    """Read a YES/NO verdict from the first word of a reply, if there is one.

    The stored answer text is never rewritten; this is a view for callers
    that want a boolean. Returns None for anything else.
    """
    match = _VERDICT_WORD.search(text or "")
    if not match:
        return None
    word = match.group(0).upper()
    if word == "YES":
        return True
    if word == "NO":
        return False
    return None
