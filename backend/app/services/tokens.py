"""Storage helpers for emailed single-use tokens.

Callers own the transaction: ``issue_token`` only stages changes on the
session so the token lands in the same commit as the state it belongs to.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.models import AuthToken, TokenPurpose, User
from app.services.auth import generate_token, hash_token, utcnow

logger = logging.getLogger(__name__)


def issue_token(
    db: Session,
    user: User,
    purpose: TokenPurpose,
    lifetime: timedelta,
    now: datetime | None = None,
) -> str:
    """Stage a fresh token for ``user``, replacing any previous one for the same purpose.

    Returns the plaintext token; only its hash is persisted.
    """
    token = generate_token()
    expires_at = (now or utcnow()) + lifetime

    existing = (
        db.query(AuthToken)
        .filter(AuthToken.user_id == user.id, AuthToken.purpose == purpose)
        .first()
    )
    if existing:
        existing.token_hash = hash_token(token)
        existing.expires_at = expires_at
    else:
        db.add(
            AuthToken(
                user_id=user.id,
                purpose=purpose,
                token_hash=hash_token(token),
                expires_at=expires_at,
            )
        )
    return token


def find_valid_token(
    db: Session, token: str, purpose: TokenPurpose, now: datetime
) -> AuthToken | None:
    """Return the unexpired token row matching ``token``, or None.

    Unknown and expired tokens are indistinguishable to the caller.
    """
    if not token:
        return None
    return (
        db.query(AuthToken)
        .filter(
            AuthToken.token_hash == hash_token(token),
            AuthToken.purpose == purpose,
            AuthToken.expires_at > now,
        )
        .first()
    )


def has_pending_token(db: Session, user_id: int, purpose: TokenPurpose, now: datetime) -> bool:
    return (
        db.query(AuthToken.id)
        .filter(
            AuthToken.user_id == user_id,
            AuthToken.purpose == purpose,
            AuthToken.expires_at > now,
        )
        .first()
        is not None
    )


def purge_expired_tokens(db: Session, now: datetime | None = None) -> int:
    """Delete every token whose expiry has passed. Returns the number removed."""
    cutoff = now or utcnow()
    deleted = (
        db.query(AuthToken)
        .filter(AuthToken.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info(f"Purged {deleted} expired tokens")
    return deleted
