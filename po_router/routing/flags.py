from po_router.core.rules import RoutingRules
from po_router.routing.trail import DecisionTrail

HIGH_VOLUME_FLAG = "10+ LINES"
LOW_VOLUME_FLAG = "CHECKERED FLAG"


def compute_volume_flags(line_count: int, rules: RoutingRules, trail: DecisionTrail) -> list[str]:
    # Advisory only; the route never depends on these.
    if line_count >= rules.high_volume_line_threshold:
        trail.warn(f"High line count detected ({line_count} lines)")
        return [HIGH_VOLUME_FLAG]
    if 0 < line_count <= rules.low_volume_line_threshold:
        return [LOW_VOLUME_FLAG]
    return []
