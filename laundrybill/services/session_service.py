from __future__ import annotations

import hashlib
import logging
import secrets
import time
from typing import Any

from laundrybill.constants import to_iso, utc_now
from laundrybill.errors import ServiceUnavailableError, UnauthorizedError, ValidationError
from laundrybill.models.session import Session
from laundrybill.repositories.base import SessionRepository
from laundrybill.settings import Settings
from laundrybill.store.base import StoreError

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if authorization and authorization.startswith("Bearer "):
        return authorization[len("Bearer ") :].strip() or None
    return None


class SessionService:
    """Issues and checks bearer sessions.

    Only the sha256 of a token is stored. A session read after its expiry is
    deleted on the spot; the store's TTL sweeps the ones nobody reads.
    """

    def __init__(self, repo: SessionRepository, settings: Settings) -> None:
        self.repo = repo
        self.settings = settings

    def login(self, passcode: Any) -> tuple[str, Session]:
        passcode = passcode.strip() if isinstance(passcode, str) else ""
        if not passcode:
            raise ValidationError("Passcode is required")

        if not self.settings.passcode_configured():
            raise ServiceUnavailableError(
                "Authentication service is not configured. Please contact administrator."
            )

        if not secrets.compare_digest(passcode.encode(), self.settings.admin_passcode.encode()):
            logger.warning("Login failed: invalid passcode")
            raise UnauthorizedError("Invalid passcode")

        token = secrets.token_hex(32)
        session = Session(
            token_hash=hash_token(token),
            username=self.settings.admin_username,
            created_at=to_iso(utc_now()),
            expires_at=int(time.time()) + self.settings.session_duration_seconds,
        )
        self.repo.create(session)
        logger.info("Session created for %s", session.username)
        return token, session

    def verify(self, token: str | None) -> Session:
        if not token:
            raise UnauthorizedError()

        token_hash = hash_token(token)
        try:
            session = self.repo.get(token_hash)
        except StoreError as exc:
            logger.exception("Session lookup failed")
            raise UnauthorizedError() from exc

        if session is None:
            logger.info("Unknown session token")
            raise UnauthorizedError()

        if session.is_expired(time.time()):
            logger.info("Session for %s expired, removing", session.username)
            try:
                self.repo.delete(token_hash)
            except Exception:
                logger.warning("Could not delete expired session", exc_info=True)
            raise UnauthorizedError()

        return session

    def logout(self, token: str | None) -> None:
        session = self.verify(token)
        self.repo.delete(session.token_hash)
        logger.info("Session closed for %s", session.username)
