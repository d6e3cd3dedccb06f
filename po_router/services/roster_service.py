from __future__ import annotations

import logging
import threading
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.orm import Session, sessionmaker

from po_router.core.errors import RosterConflictError
from po_router.core.schemas import ExtractionResult, Role, RoutingDecision, TeamMember
from po_router.db.models import RoutingDecisionRecord, TeamMemberRecord
from po_router.orchestration.orchestrator import RoutingEngine


class RosterService:
    """Single writer for the persisted roster.

    ``route`` reads the roster, decides and writes the new counters inside one
    lock and one transaction so two concurrent orders never both see the same
    stale minimum load. ``preview`` only reads and does not take the lock.
    """

    def __init__(self, session_factory: sessionmaker[Session], engine: RoutingEngine) -> None:
        self._logger = logging.getLogger(__name__)
        self._session_factory = session_factory
        self._engine = engine
        self._lock = threading.Lock()

    def route(self, extraction: ExtractionResult) -> RoutingDecision:
        with self._lock:
            with self._session_factory() as session:
                records = self._load_records(session, for_update=True)
                roster = [_to_member(record) for record in records]

                decision, updated_roster = self._engine.decide(extraction, roster)

                self._write_counters(records, updated_roster)
                session.add(self._decision_record(extraction, decision))
                session.commit()

        self._logger.info(
            "Routing decision persisted",
            extra={
                "event": "routing_persisted",
                "po_number": extraction.po_number,
                "route": decision.route,
                "assignee_id": decision.assignee_id,
                "page_count": decision.page_count,
            },
        )
        return decision

    def preview(self, extraction: ExtractionResult) -> RoutingDecision:
        return self._engine.evaluate(extraction, self.list_roster())

    def list_roster(self) -> list[TeamMember]:
        with self._session_factory() as session:
            return [_to_member(record) for record in self._load_records(session)]

    def replace_roster(self, members: list[TeamMember]) -> list[TeamMember]:
        seen: set[str] = set()
        duplicates: set[str] = set()
        for member in members:
            if member.id in seen:
                duplicates.add(member.id)
            seen.add(member.id)
        if duplicates:
            raise RosterConflictError(f"Duplicate operator ids in roster: {', '.join(sorted(duplicates))}")

        with self._lock:
            with self._session_factory() as session:
                session.execute(delete(TeamMemberRecord))
                session.add_all(
                    [
                        TeamMemberRecord(
                            id=member.id,
                            position=position,
                            name=member.name,
                            role=member.role.value,
                            cards=member.cards,
                            total_pages=member.total_pages,
                        )
                        for position, member in enumerate(members)
                    ]
                )
                session.commit()

        self._logger.info(
            "Roster replaced",
            extra={
                "event": "roster_replaced",
                "roster_size": len(members),
                "generalists": sum(1 for member in members if member.role == Role.ORDER_ENTRY),
                "specialists": sum(1 for member in members if member.role == Role.KEYING),
            },
        )
        return list(members)

    def recent_decisions(self, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        with self._session_factory() as session:
            records = session.execute(
                select(RoutingDecisionRecord)
                .order_by(RoutingDecisionRecord.id.desc())
                .offset(offset)
                .limit(limit)
            ).scalars().all()

            return [
                {
                    "decisionId": record.id,
                    "poNumber": record.po_number,
                    "customerName": record.customer_name,
                    "route": record.route,
                    "assigneeId": record.assignee_id,
                    "reason": record.reason,
                    "evidence": record.evidence,
                    "restricted": record.restricted,
                    "flags": record.flags,
                    "logs": record.logs,
                    "pageCount": record.page_count,
                    "rulesVersion": record.rules_version,
                    "createdAt": record.created_at,
                }
                for record in records
            ]

    @staticmethod
    def _load_records(session: Session, for_update: bool = False) -> list[TeamMemberRecord]:
        statement = select(TeamMemberRecord).order_by(TeamMemberRecord.position, TeamMemberRecord.id)
        if for_update:
            # Rendered as SELECT ... FOR UPDATE only on dialects that support it.
            statement = statement.with_for_update()
        return list(session.execute(statement).scalars().all())

    @staticmethod
    def _write_counters(records: list[TeamMemberRecord], updated_roster: list[TeamMember]) -> None:
        by_id = {member.id: member for member in updated_roster}
        for record in records:
            member = by_id.get(record.id)
            if member is None:
                continue
            if record.cards != member.cards or record.total_pages != member.total_pages:
                record.cards = member.cards
                record.total_pages = member.total_pages

    def _decision_record(
        self,
        extraction: ExtractionResult,
        decision: RoutingDecision,
    ) -> RoutingDecisionRecord:
        return RoutingDecisionRecord(
            po_number=extraction.po_number,
            customer_name=extraction.customer_info.name,
            route=decision.route,
            assignee_id=decision.assignee_id,
            reason=decision.reason,
            evidence=decision.evidence,
            restricted=decision.restricted,
            flags=list(decision.flags),
            logs=list(decision.logs),
            page_count=decision.page_count,
            rules_version=self._engine.rules.version,
            extraction_payload=extraction.model_dump(mode="json", by_alias=True),
        )


def _to_member(record: TeamMemberRecord) -> TeamMember:
    return TeamMember(
        id=record.id,
        name=record.name,
        role=Role(record.role),
        cards=record.cards,
        total_pages=record.total_pages,
    )
