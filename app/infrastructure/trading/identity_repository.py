"""
Adapter: API token identity.

Implements CallerIdentityPort. Tokens are opaque random strings; only
their SHA-256 digest is stored in ``api_tokens``.
"""

import hashlib
import logging
import secrets
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.engine import Engine

from app.domain.trading.entities import utcnow
from app.domain.trading.ports import CallerIdentityPort
from app.infrastructure.trading.tables import api_tokens

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class ApiTokenIdentityAdapter(CallerIdentityPort):
    """Resolves bearer tokens against the api_tokens table."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def resolve(self, token: str) -> Optional[UUID]:
        with self._engine.connect() as conn:
            return conn.execute(
                select(api_tokens.c.owner_id).where(
                    api_tokens.c.token_hash == hash_token(token)
                )
            ).scalar_one_or_none()

    def issue(self, owner_id: UUID, label: Optional[str] = None) -> str:
        """Create a new token for an owner and return it in clear text.

        The clear token is not stored and cannot be recovered later.
        """
        token = secrets.token_urlsafe(32)
        with self._engine.begin() as conn:
            conn.execute(
                api_tokens.insert().values(
                    token_hash=hash_token(token),
                    owner_id=owner_id,
                    label=label,
                    created_at=utcnow(),
                )
            )
        logger.info("Issued API token for owner=%s", owner_id)
        return token
