from app.services.auth import (
    hash_password,
    verify_password,
    create_access_token,
    decode_access_token,
    generate_token,
    hash_token,
)
from app.services.email import send_verification_email, send_password_reset_email

__all__ = [
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    "generate_token",
    "hash_token",
    "send_verification_email",
    "send_password_reset_email",
]
