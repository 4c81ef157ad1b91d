from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.auth.tokens import AuthError, hash_magic_token, magic_link_expiry, new_magic_token, now_utc
from app.models.auth_magic_link import AuthMagicLink
from app.models.user import User

class LinkInvalid(AuthError):
    def __init__(self) -> None:
        super().__init__("invalid token")

class LinkUsed(AuthError):
    def __init__(self) -> None:
        super().__init__("token already used")

class LinkExpired(AuthError):
    def __init__(self) -> None:
        super().__init__("token expired")

def _aware(dt: datetime) -> datetime:
    # sqlite hands back naive values
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def find_or_create_user(db: Session, email: str, name: str | None = None) -> User:
    email = email.lower().strip()
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email, name=name)
        db.add(user)
        db.flush()
    elif name and not user.name:
        user.name = name
    return user

def issue(db: Session, email: str, name: str | None = None) -> tuple[User, str]:
    # returns the raw token; only its hash is stored
    user = find_or_create_user(db, email, name)
    token = new_magic_token()
    db.add(AuthMagicLink(token_hash=hash_magic_token(token), user_id=user.id, expires_at=magic_link_expiry()))
    db.commit()
    return user, token

def redeem(db: Session, token: str) -> User:
    token_hash = hash_magic_token(token.strip())
    now = now_utc()

    # single statement so two concurrent redeems cannot both win
    stmt = (
        update(AuthMagicLink)
        .where(
            AuthMagicLink.token_hash == token_hash,
            AuthMagicLink.used_at.is_(None),
            AuthMagicLink.expires_at > now,
        )
        .values(used_at=now)
        .returning(AuthMagicLink.user_id)
    )
    user_id = db.scalar(stmt)

    if user_id is None:
        db.rollback()
        link = db.get(AuthMagicLink, token_hash)
        if link is None:
            raise LinkInvalid()
        if link.used_at is not None:
            raise LinkUsed()
        if _aware(link.expires_at) <= now:
            raise LinkExpired()
        raise LinkInvalid()

    user = db.get(User, user_id)
    if user is None:
        db.rollback()
        raise LinkInvalid()

    db.commit()
    return user
