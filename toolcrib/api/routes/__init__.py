"""API route modules."""

from toolcrib.api.routes.catalog import router as catalog_router
from toolcrib.api.routes.health import router as health_router
from toolcrib.api.routes.inbound import router as inbound_router
from toolcrib.api.routes.inventory import router as inventory_router
from toolcrib.api.routes.outbound import router as outbound_router
from toolcrib.api.routes.tool_changes import router as tool_changes_router

__all__ = [
    "catalog_router",
    "health_router",
    "inbound_router",
    "inventory_router",
    "outbound_router",
    "tool_changes_router",
]
