"""File-backed owner of the CMS login session."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import jwt
from blogdesk.cms.models import AuthSession

logger = logging.getLogger(__name__)

SESSION_FILENAME = ".blogdesk-session.json"


class AuthSessionStore:
    """Persists the JWT and user record returned by a login.

    A stored session whose token has expired is reported as absent.
    Signatures are not checked here; the CMS does that on every call.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> AuthSession | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            session = AuthSession.model_validate(data)
        except (json.JSONDecodeError, ValueError, KeyError, OSError):
            logger.warning("Corrupt session file at %s, ignoring", self.path)
            return None
        if self._expired(session.jwt):
            logger.info("Stored session for %s has expired", session.user.username)
            return None
        return session

    def save(self, session: AuthSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        self.path.chmod(0o600)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)

    @staticmethod
    def _expired(token: str) -> bool:
        try:
            jwt.decode(token, options={"verify_signature": False, "verify_exp": True})
        except jwt.ExpiredSignatureError:
            return True
        except jwt.PyJWTError:
            # Opaque (non-JWT) tokens carry no expiry we can read.
            return False
        return False
