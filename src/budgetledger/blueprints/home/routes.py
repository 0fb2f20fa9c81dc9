"""Health check route."""

from __future__ import annotations

from ...extensions import get_engine
from ...infra.database import check_connection
from ..common import success
from . import bp


@bp.get("/health")
def health():
    if check_connection(get_engine()):
        return success({"status": "ok", "database": "ok"})
    return success({"status": "degraded", "database": "unreachable"}, 503)
