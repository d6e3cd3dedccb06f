import logging
import time
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from po_router.core.errors import EmptyPoolError
from po_router.core.schemas import ExtractionResult, RoutingDecision
from po_router.core.security import verify_routing_api_key
from po_router.processing.data_cleaner import clean_extraction_payload
from po_router.services.roster_service import RosterService


def _sanitize_log_value(value: str) -> str:
    return " ".join(value.splitlines()).strip()


def parse_extraction(payload: Any) -> ExtractionResult:
    try:
        return ExtractionResult.model_validate(clean_extraction_payload(payload))
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid extraction result: {exc.error_count()} validation error(s)",
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def build_routing_router(roster_service: RosterService) -> APIRouter:
    router = APIRouter(prefix="", tags=["routing"], dependencies=[Depends(verify_routing_api_key)])
    logger = logging.getLogger(__name__)

    @router.post("/route", response_model=RoutingDecision)
    def route_extraction(payload: Any = Body(...)) -> RoutingDecision:
        start = time.perf_counter()
        extraction = parse_extraction(payload)

        try:
            decision = roster_service.route(extraction)
        except EmptyPoolError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

        logger.info(
            "Extraction routed",
            extra={
                "event": "route_request_processed",
                "po_number": _sanitize_log_value(extraction.po_number),
                "route": decision.route,
                "reason": decision.reason,
                "processing_time_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return decision

    @router.post("/route/preview", response_model=RoutingDecision)
    def preview_extraction(payload: Any = Body(...)) -> RoutingDecision:
        extraction = parse_extraction(payload)
        try:
            return roster_service.preview(extraction)
        except EmptyPoolError as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return router
