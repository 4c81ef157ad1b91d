import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth import magic_links
from app.auth.tokens import AuthError, issue_access_token
from app.config import settings
from app.db import get_db
from app.ratelimit import rate_limit
from app.schemas.auth import AccessTokenOut, RedeemIn, RequestLinkIn, RequestLinkOut

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

_request_limit = rate_limit(
    "auth:request_link",
    limit_per_window=settings.rate_limit_auth_request_link_per_min,
    window_seconds=60,
)
_redeem_limit = rate_limit(
    "auth:redeem",
    limit_per_window=settings.rate_limit_auth_redeem_per_min,
    window_seconds=60,
)

@router.post("/request-link", response_model=RequestLinkOut, dependencies=[Depends(_request_limit)])
def request_link(payload: RequestLinkIn, db: Session = Depends(get_db)) -> RequestLinkOut:
    user, token = magic_links.issue(db, payload.email, payload.name)
    log.info("login_link_issued", user_id=str(user.id))

    # outside prod the token comes back directly so clients and tests can redeem it
    if settings.app_env == "prod":
        return RequestLinkOut(link=f"{settings.base_url}/auth/redeem?token={token}")
    return RequestLinkOut(token=token)

@router.post("/redeem", response_model=AccessTokenOut, dependencies=[Depends(_redeem_limit)])
def redeem(payload: RedeemIn, db: Session = Depends(get_db)) -> AccessTokenOut:
    try:
        user = magic_links.redeem(db, payload.token)
    except AuthError as e:
        log.info("login_rejected", reason=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    log.info("login_redeemed", user_id=str(user.id))
    return AccessTokenOut(access_token=issue_access_token(user.id))
