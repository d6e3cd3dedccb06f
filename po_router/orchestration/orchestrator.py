import logging
import operator
from typing import Annotated, NotRequired, TypedDict

from langgraph.graph import END, StateGraph

from po_router.core.errors import EmptyPoolError
from po_router.core.rules import RoutingRules
from po_router.core.schemas import ExtractionResult, RoutingDecision, TeamMember
from po_router.routing.balancer import find_specialist, lowest_load_reason, select_least_loaded
from po_router.routing.flags import compute_volume_flags
from po_router.routing.restrictions import RestrictionMatch, detect_restriction
from po_router.routing.roster import apply_decision
from po_router.routing.trail import DecisionTrail


class RoutingState(TypedDict):
    extraction: ExtractionResult
    roster: list[TeamMember]
    logs: Annotated[list[str], operator.add]
    flags: NotRequired[list[str]]
    restriction: NotRequired[RestrictionMatch | None]
    route: NotRequired[str]
    reason: NotRequired[str]
    evidence: NotRequired[str]
    assignee_id: NotRequired[str | None]
    decision: NotRequired[RoutingDecision]


class RoutingEngine:
    """Start -> RestrictionCheck -> SpecialistAssign | BalancedAssign -> Complete.

    The engine holds no roster state of its own: every call receives a roster
    snapshot and returns a new one, so callers decide where the single-writer
    critical section lives.
    """

    def __init__(self, rules: RoutingRules | None = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._rules = rules if rules is not None else RoutingRules()
        self._graph = self._compile_graph()

    @property
    def rules(self) -> RoutingRules:
        return self._rules

    def decide(
        self,
        extraction: ExtractionResult,
        roster: list[TeamMember],
    ) -> tuple[RoutingDecision, list[TeamMember]]:
        decision = self.evaluate(extraction, roster)
        return decision, apply_decision(roster, decision)

    def evaluate(self, extraction: ExtractionResult, roster: list[TeamMember]) -> RoutingDecision:
        state: RoutingState = {
            "extraction": extraction,
            "roster": list(roster),
            "logs": [],
        }

        try:
            result = self._graph.invoke(state)
        except EmptyPoolError as exc:
            self._logger.warning(
                "No generalist available for balanced assignment",
                extra={
                    "event": "routing_empty_pool",
                    "po_number": extraction.po_number,
                    "roster_size": len(roster),
                    "error": str(exc),
                },
            )
            raise

        decision: RoutingDecision = result["decision"]
        self._logger.info(
            "Routing decision created",
            extra={
                "event": "routing_completed",
                "po_number": extraction.po_number,
                "route": decision.route,
                "reason": decision.reason,
                "flags": decision.flags,
                "restricted": decision.restricted,
                "rules_version": self._rules.version,
            },
        )
        return decision

    def _compile_graph(self):
        graph = StateGraph(RoutingState)
        graph.add_node("start", self._start_node)
        graph.add_node("restriction_check", self._restriction_check_node)
        graph.add_node("specialist_assign", self._specialist_assign_node)
        graph.add_node("balanced_assign", self._balanced_assign_node)
        graph.add_node("complete", self._complete_node)

        graph.set_entry_point("start")
        graph.add_edge("start", "restriction_check")
        graph.add_conditional_edges(
            "restriction_check",
            self._select_branch,
            {"matched": "specialist_assign", "unmatched": "balanced_assign"},
        )
        graph.add_edge("specialist_assign", "complete")
        graph.add_edge("balanced_assign", "complete")
        graph.add_edge("complete", END)

        return graph.compile()

    def _start_node(self, state: RoutingState) -> dict:
        trail = DecisionTrail()
        trail.record("Initializing routing analysis...")
        trail.record("Scanning for restriction flags...")
        flags = compute_volume_flags(state["extraction"].effective_line_count, self._rules, trail)
        return {"logs": trail.entries, "flags": flags}

    def _restriction_check_node(self, state: RoutingState) -> dict:
        trail = DecisionTrail()
        match = detect_restriction(state["extraction"], self._rules, trail)
        return {"logs": trail.entries, "restriction": match}

    @staticmethod
    def _select_branch(state: RoutingState) -> str:
        return "matched" if state.get("restriction") is not None else "unmatched"

    def _specialist_assign_node(self, state: RoutingState) -> dict:
        trail = DecisionTrail()
        match = state["restriction"]
        specialist = find_specialist(state["roster"], self._rules)

        if specialist is not None:
            route = specialist.name
            assignee_id: str | None = specialist.id
            trail.record(f"Redirecting to {self._rules.specialist_role.value} specialist: {route}")
        else:
            route = self._rules.specialist_fallback_label
            assignee_id = None
            trail.record(
                f"No {self._rules.specialist_role.value} operator on roster; redirecting to {route}"
            )

        return {
            "logs": trail.entries,
            "route": route,
            "assignee_id": assignee_id,
            "reason": match.reason,
            "evidence": match.evidence,
        }

    def _balanced_assign_node(self, state: RoutingState) -> dict:
        trail = DecisionTrail()
        trail.record("No restrictions found")
        chosen = select_least_loaded(state["roster"], self._rules, trail)
        return {
            "logs": trail.entries,
            "route": chosen.name,
            "assignee_id": chosen.id,
            "reason": lowest_load_reason(chosen),
            "evidence": "",
        }

    def _complete_node(self, state: RoutingState) -> dict:
        decision = RoutingDecision(
            route=state["route"],
            flags=list(state.get("flags", [])),
            reason=state["reason"],
            evidence=state.get("evidence", ""),
            logs=list(state["logs"]),
            page_count=state["extraction"].page_count,
            restricted=state.get("restriction") is not None,
            assignee_id=state.get("assignee_id"),
        )
        return {"decision": decision}
