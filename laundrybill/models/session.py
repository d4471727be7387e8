from __future__ import annotations

from pydantic import BaseModel


class Session(BaseModel):
    token_hash: str
    username: str
    created_at: str | None = None
    expires_at: int | None = None  # epoch seconds, store TTL

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and self.expires_at < now
