"""Core primitives: config, routing rules, schemas, errors, security."""

from po_router.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
