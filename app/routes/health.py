from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.db import db_ping
from app.redis_client import redis_ping

router = APIRouter(tags=["health"])

@router.get("/health")
def health() -> dict:
    return {"status": "ok"}

# readiness probe
@router.get("/ready")
def ready(request: Request):
    checks: dict[str, bool] = {}
    errors: dict[str, str] = {}

    for name, fn in (("db", db_ping), ("redis", redis_ping)):
        try:
            checks[name] = bool(fn())
        except Exception as e:
            checks[name] = False
            msg = str(e).strip()
            errors[name] = f"{e.__class__.__name__}{(': ' + msg) if msg else ''}"

    ok = all(checks.values())

    body: dict = {"status": "ok" if ok else "unready", "checks": checks}
    if errors:
        body["errors"] = errors

    scheduler = getattr(request.app.state, "scheduler", None)
    body["scheduler"] = "running" if scheduler is not None and scheduler.running else "off"

    # 200 only when db + redis are reachable, 503 with details otherwise
    return JSONResponse(status_code=200 if ok else 503, content=body)
