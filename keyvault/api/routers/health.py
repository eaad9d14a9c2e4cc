"""Health route."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from keyvault.vault.dal import check_health

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Report database connectivity."""
    h = check_health()
    services = {"database": "ok" if h["status"] == "ok" else f"error:{h.get('error', 'unknown')}"}
    all_ok = all(v == "ok" for v in services.values())
    status_code = 200 if all_ok else 503
    return JSONResponse(
        {"status": "ok" if all_ok else "degraded", "services": services},
        status_code=status_code,
    )
