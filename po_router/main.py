from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from po_router.core.config import get_settings
from po_router.core.errors import RoutingRulesError
from po_router.core.rules import load_routing_rules
from po_router.db.session import SessionLocal, init_db
from po_router.logging.logging_config import configure_logging
from po_router.orchestration.orchestrator import RoutingEngine
from po_router.routers.roster_router import build_roster_router
from po_router.routers.routing_router import build_routing_router
from po_router.services.roster_service import RosterService


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    try:
        settings.validate_required()
        rules = load_routing_rules(settings.routing_rules_path)
    except (ValueError, RoutingRulesError) as exc:
        logger.error(
            "Startup configuration validation failed",
            extra={"event": "startup_config_invalid", "error": str(exc)},
        )
        raise RuntimeError(str(exc)) from exc

    init_db()

    roster_service = RosterService(session_factory=SessionLocal, engine=RoutingEngine(rules))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "API startup complete",
            extra={
                "event": "api_startup_complete",
                "service": settings.app_name,
                "rules_version": rules.version,
            },
        )
        logger.info(
            "CORS configured",
            extra={
                "event": "cors_configured",
                "allowed_origins": settings.allowed_origins,
            },
        )
        yield

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(build_routing_router(roster_service))
    app.include_router(
        build_roster_router(roster_service, default_page_size=settings.decision_page_size)
    )

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "service": settings.app_name, "rules_version": rules.version}

    return app
