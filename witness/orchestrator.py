"""Answer orchestration: description lookup, transport selection, interrogation."""

import logging
import uuid

from config.config_loader import DefaultsConfig, PromptsConfig
from witness.game_service import GameService
from witness.models import Answer, ProviderDescriptor, Question, Round
from witness.protocol import interrogate
from witness.transports.base import ProviderError, Send, UnsupportedProvider
from witness.transports.dispatch import build_transport

logger = logging.getLogger(__name__)


def join_description(fragments: list[str]) -> str:
    """Join description fragments in the order they were generated."""
    return "\n".join(fragments)


async def _record_failure(game_service: GameService, reason: str, interrogation_id: str) -> None:
    """Best effort. A failure here is logged and dropped."""
    try:
        await game_service.record_failed_answer(reason, interrogation_id)
    except Exception as exc:
        logger.warning("Could not record failed answer for %s: %s", interrogation_id, exc)


async def generate_answer(
    interrogation_id: str,
    question: Question,
    suspect_id: str,
    provider: ProviderDescriptor,
    game_service: GameService,
    defaults: DefaultsConfig | None = None,
    prompts: PromptsConfig | None = None,
    send: Send | None = None,
) -> Answer | None:
    """Interrogate the witness about one suspect and package the answer.

    Never raises. Any fault is logged, recorded once through
    game_service.record_failed_answer, and turned into a None return so a
    single unanswerable question cannot stop the game.

    Args:
        interrogation_id: Round the answer belongs to; also keys the failure record.
        question: Only question.english is sent.
        suspect_id: Suspect whose description the witness reads.
        provider: Active provider, passed explicitly per call.
        game_service: Description source and failure sink.
        defaults: Timeouts and token limits for the transport.
        prompts: Reflection/decision templates.
        send: Injected transport; bypasses provider-kind selection when set.

    Returns:
        Answer with a fresh id and the verbatim decision, or None on failure.
    """
    try:
        fragments = await game_service.get_suspect_description(
            suspect_id, provider.name, provider.vision_model
        )
        description = join_description(fragments)

        if send is None:
            send = build_transport(provider, defaults).send

        decision = await interrogate(
            question.english,
            description,
            send,
            prompts=prompts,
            provider_name=provider.name,
        )
    except UnsupportedProvider as exc:
        logger.error("Unsupported provider %r for %s: %s", provider.name, interrogation_id, exc)
        await _record_failure(game_service, f"failed: unsupported provider '{provider.name}'", interrogation_id)
        return None
    except ProviderError as exc:
        logger.error("Interrogation %s failed: %s", interrogation_id, exc)
        await _record_failure(game_service, f"failed: {type(exc).__name__}: {exc}", interrogation_id)
        return None
    except Exception as exc:
        logger.error("Interrogation %s failed unexpectedly: %s", interrogation_id, exc)
        await _record_failure(game_service, f"failed: {exc}", interrogation_id)
        return None

    answer = Answer(id=str(uuid.uuid4()), text=decision)
    logger.info("Answer for %s is: %s", interrogation_id, answer.text)
    return answer


async def answer_round(
    game_round: Round,
    criminal_id: str,
    provider: ProviderDescriptor,
    game_service: GameService,
    defaults: DefaultsConfig | None = None,
    prompts: PromptsConfig | None = None,
) -> Answer | None:
    """Answer the round's question about the criminal and store it on the server.

    The round is updated in place on success. Saving is best effort.
    """
    answer = await generate_answer(
        game_round.id,
        game_round.question,
        criminal_id,
        provider,
        game_service,
        defaults=defaults,
        prompts=prompts,
    )
    if answer is None:
        return None

    game_round.answer = answer.text
    game_round.answer_id = answer.id
    try:
        await game_service.save_answer(answer.text, game_round.id)
    except Exception as exc:
        logger.warning("Could not save answer for round %s: %s", game_round.id, exc)
    return answer
