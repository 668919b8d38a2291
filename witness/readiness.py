"""Provider readiness probes: can this provider serve an interrogation right now?"""

import asyncio
import logging

from config.config_loader import DefaultsConfig
from witness.models import LOCAL_DAEMON, ProviderDescriptor, ReadinessStatus
from witness.transports.base import ChatTransport, ProviderError
from witness.transports.dispatch import build_transport
from witness.transports.kinds import normalize_kind

logger = logging.getLogger(__name__)


def registry_has_model(registry: list[str], model: str) -> bool:
    """Exact identifier match first, then the identifier before its first ':'."""
    if not model:
        return False
    if any(entry == model for entry in registry):
        return True
    return any(entry.split(":", 1)[0] == model for entry in registry)


async def _probe_local(provider: ProviderDescriptor, transport: ChatTransport) -> ReadinessStatus:
    try:
        registry = await transport.list_models()
    except ProviderError as exc:
        return ReadinessStatus(provider, False, f"Ollama error: {exc}")

    if not registry:
        return ReadinessStatus(provider, False, "Ollama registry is empty")
    if registry_has_model(registry, provider.interrogation_model):
        return ReadinessStatus(provider, True, "Ollama is running")
    return ReadinessStatus(provider, False, "not ready")


async def _probe_remote(provider: ProviderDescriptor, transport: ChatTransport) -> ReadinessStatus:
    # Reachability only: the configured model name is not looked up.
    try:
        models = await transport.list_models()
    except ProviderError as exc:
        return ReadinessStatus(provider, False, f"{provider.name} error: {exc}")

    if not models:
        return ReadinessStatus(provider, False, f"{provider.name} returned no models")
    return ReadinessStatus(provider, True, f"{provider.name} is ready")


async def probe_readiness(
    provider: ProviderDescriptor,
    defaults: DefaultsConfig | None = None,
    transport: ChatTransport | None = None,
) -> ReadinessStatus:
    """Check one provider without interrogating. Never raises."""
    try:
        transport = transport or build_transport(provider, defaults)
    except ProviderError as exc:
        return ReadinessStatus(provider, False, str(exc))

    try:
        if normalize_kind(provider) == LOCAL_DAEMON:
            status = await _probe_local(provider, transport)
        else:
            status = await _probe_remote(provider, transport)
    except Exception as exc:
        logger.warning("Readiness %s: unexpected probe failure: %s", provider.name, exc)
        return ReadinessStatus(provider, False, f"{provider.name} error: {exc}")
    logger.info("Readiness %s: %s (%s)", provider.name, status.ready, status.message)
    return status


async def _probe_one(provider: ProviderDescriptor, defaults: DefaultsConfig) -> ReadinessStatus:
    try:
        return await asyncio.wait_for(
            probe_readiness(provider, defaults),
            timeout=defaults.probe_timeout_sec,
        )
    except TimeoutError:
        return ReadinessStatus(provider, False, f"Probe timed out after {defaults.probe_timeout_sec}s")
    except Exception as exc:
        return ReadinessStatus(provider, False, f"{provider.name} error: {exc}")


async def probe_all(
    providers: list[ProviderDescriptor],
    defaults: DefaultsConfig | None = None,
) -> dict[str, ReadinessStatus]:
    """Probe all providers in parallel.

    Returns:
        Dict mapping provider name -> ReadinessStatus.

    Raises:
        ValueError: if two providers share a name.
    """
    names = [p.name for p in providers]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ValueError(f"Duplicate provider names: {', '.join(duplicates)}")

    defaults = defaults or DefaultsConfig()
    results = await asyncio.gather(*(_probe_one(p, defaults) for p in providers))
    return {status.provider.name: status for status in results}
