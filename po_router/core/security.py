import logging
import secrets

from fastapi import Depends, Header, HTTPException, Request, status

from po_router.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def _verify_api_key(
    request: Request,
    x_api_key: str | None,
    expected_secret: str,
    scope: str,
) -> None:
    client_host = request.client.host if request.client else None

    if not expected_secret:
        logger.error(
            f"{scope.capitalize()} API key missing in environment",
            extra={"event": f"{scope}_secret_missing"},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server authentication is not configured",
        )

    if not x_api_key:
        logger.warning(
            "Unauthorized request: missing API key",
            extra={
                "event": f"{scope}_unauthorized_missing_key",
                "client_host": client_host,
                "path": request.url.path,
            },
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if not secrets.compare_digest(x_api_key, expected_secret):
        logger.warning(
            "Unauthorized request: invalid API key",
            extra={
                "event": f"{scope}_unauthorized_invalid_key",
                "client_host": client_host,
                "path": request.url.path,
            },
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


def verify_routing_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-KEY"),
    settings: Settings = Depends(get_settings),
) -> None:
    _verify_api_key(request, x_api_key, settings.routing_api_key.strip(), scope="routing")


def verify_admin_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None, alias="X-API-KEY"),
    settings: Settings = Depends(get_settings),
) -> None:
    _verify_api_key(request, x_api_key, settings.resolved_admin_api_key, scope="admin")
