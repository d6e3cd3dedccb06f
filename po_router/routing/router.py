from functools import lru_cache
from threading import Lock

from po_router.core.rules import RoutingRules
from po_router.core.schemas import ExtractionResult, RoutingDecision, TeamMember
from po_router.orchestration.orchestrator import RoutingEngine

_ENGINE_CACHE_SIZE = 16

# Keyed by id(); the rules object is held alongside so its id is not reused.
_engines: dict[int, tuple[RoutingRules, RoutingEngine]] = {}
_engines_lock = Lock()


@lru_cache(maxsize=1)
def get_default_engine() -> RoutingEngine:
    return RoutingEngine(RoutingRules())


def _engine_for(rules: RoutingRules | None) -> RoutingEngine:
    if rules is None:
        return get_default_engine()

    with _engines_lock:
        cached = _engines.get(id(rules))
        if cached is not None and cached[0] is rules:
            return cached[1]

        engine = RoutingEngine(rules)
        if len(_engines) >= _ENGINE_CACHE_SIZE:
            _engines.pop(next(iter(_engines)))
        _engines[id(rules)] = (rules, engine)
        return engine


def decide(
    extraction: ExtractionResult,
    roster: list[TeamMember],
    rules: RoutingRules | None = None,
) -> tuple[RoutingDecision, list[TeamMember]]:
    """Route one extraction result and return the decision with the updated roster.

    Neither argument is mutated.
    """
    return _engine_for(rules).decide(extraction, roster)


def route_order(
    extraction: ExtractionResult,
    roster: list[TeamMember],
    rules: RoutingRules | None = None,
) -> RoutingDecision:
    return _engine_for(rules).evaluate(extraction, roster)
