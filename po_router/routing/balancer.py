from __future__ import annotations

from po_router.core.errors import EmptyPoolError
from po_router.core.rules import RoutingRules
from po_router.core.schemas import TeamMember
from po_router.routing.trail import DecisionTrail


def select_least_loaded(
    roster: list[TeamMember],
    rules: RoutingRules,
    trail: DecisionTrail,
) -> TeamMember:
    """Pick the generalist with the lowest ``total_pages``.

    Ties keep roster order because ``sorted`` is stable.
    """
    trail.record("Calculating workload balance...")

    pool = [member for member in roster if member.role == rules.generalist_role]
    if not pool:
        raise EmptyPoolError(
            f"No '{rules.generalist_role.value}' operators available for workload balancing"
        )

    chosen = sorted(pool, key=lambda member: member.total_pages)[0]
    trail.record(f"Assigned to {chosen.name} (current load: {chosen.total_pages} pages)")
    return chosen


def lowest_load_reason(member: TeamMember) -> str:
    return f"Lowest Page Load ({member.total_pages}pgs)"


def find_specialist(roster: list[TeamMember], rules: RoutingRules) -> TeamMember | None:
    for member in roster:
        if member.role == rules.specialist_role:
            return member
    return None
