from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.rental_models import Admin
from services.password_service import verify_password_hash


TOKEN_TTL_SECONDS = int(os.environ.get("TOKEN_TTL_SECONDS") or 60 * 60 * 4)


def _require_secret_key() -> bytes:
    raw = (os.environ.get("SECRET_KEY") or "").strip()
    if len(raw) < 32:
        raise RuntimeError("SECRET_KEY must be set and at least 32 characters long.")
    return raw.encode("utf-8")


_SECRET_KEY = _require_secret_key()


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(encoded: str) -> bytes:
    return base64.urlsafe_b64decode(encoded + "=" * (-len(encoded) % 4))


def authenticate_admin(db: Session, username: str | None, password: str | None) -> Admin | None:
    name = (username or "").strip()
    if not name or not password:
        return None
    admin = db.execute(select(Admin).where(Admin.username == name)).scalars().first()
    if not admin or not verify_password_hash(password, admin.password):
        return None
    return admin


def create_token(payload: dict[str, Any], now: float | None = None) -> str:
    token_payload = dict(payload)
    token_payload["expiresAt"] = (now if now is not None else time.time()) + TOKEN_TTL_SECONDS
    body = json.dumps(token_payload, ensure_ascii=True, separators=(",", ":")).encode("utf-8")
    encoded = _b64encode(body)
    signature = hmac.new(_SECRET_KEY, encoded.encode("ascii"), hashlib.sha256).digest()
    return f"{encoded}.{_b64encode(signature)}"


def issue_admin_token(admin: Admin, now: float | None = None) -> str:
    return create_token({"sub": admin.id, "username": admin.username}, now=now)


def get_token_payload(token: str | None, now: float | None = None) -> dict[str, Any] | None:
    if not token:
        return None
    try:
        encoded, encoded_sig = token.split(".", 1)
        expected_sig = hmac.new(_SECRET_KEY, encoded.encode("ascii"), hashlib.sha256).digest()
        if not hmac.compare_digest(expected_sig, _b64decode(encoded_sig)):
            return None
        decoded = json.loads(_b64decode(encoded).decode("utf-8"))
    except (ValueError, UnicodeError):
        return None

    if not isinstance(decoded, dict):
        return None
    current = now if now is not None else time.time()
    try:
        expires_at = float(decoded.get("expiresAt") or 0.0)
    except (TypeError, ValueError):
        return None
    if current >= expires_at:
        return None
    return decoded


def bearer_token(authorization: str | None) -> str | None:
    scheme, _, credentials = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()
