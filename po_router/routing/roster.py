import logging

from po_router.core.schemas import RoutingDecision, TeamMember

logger = logging.getLogger(__name__)


def apply_decision(roster: list[TeamMember], decision: RoutingDecision) -> list[TeamMember]:
    """Return a copy of ``roster`` with the decision's workload charged to the assignee.

    The assignee is the operator named by ``decision.route``; when the decision
    carries an ``assignee_id`` it disambiguates operators sharing a name. A route
    naming nobody (the specialist fallback label) leaves every counter unchanged.
    """
    target_index = _find_assignee(roster, decision)
    if target_index is None:
        logger.warning(
            "Routing decision does not name a roster operator; workload not updated",
            extra={"event": "roster_update_skipped", "route": decision.route},
        )
        return list(roster)

    updated = list(roster)
    member = updated[target_index]
    updated[target_index] = member.model_copy(
        update={
            "cards": member.cards + 1,
            "total_pages": member.total_pages + decision.page_count,
        }
    )
    return updated


def _find_assignee(roster: list[TeamMember], decision: RoutingDecision) -> int | None:
    if decision.assignee_id is not None:
        for index, member in enumerate(roster):
            if member.id == decision.assignee_id and member.name == decision.route:
                return index

    for index, member in enumerate(roster):
        if member.name == decision.route:
            return index
    return None
