import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class TokenPurpose(str, enum.Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class AuthToken(Base):
    """A single-use, expiring token emailed to a user.

    Only the SHA-256 hash of the token is stored. The plaintext exists in the
    outgoing email and nowhere else. The (user_id, purpose) unique constraint
    keeps at most one live token per flow; issuing a new one replaces the row
    and consuming it deletes the row.
    """
    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    purpose = Column(
        Enum(TokenPurpose, name="token_purpose", values_callable=lambda p: [v.value for v in p]),
        nullable=False,
    )
    token_hash = Column(String(64), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship("User", back_populates="tokens")

    __table_args__ = (
        UniqueConstraint("user_id", "purpose", name="uq_auth_token_user_purpose"),
    )
