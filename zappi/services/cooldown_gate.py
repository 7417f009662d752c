from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import Session

from zappi.models.cooldown import Cooldown
from zappi.services.session_store import session_key


def _as_utc(value: datetime) -> datetime:
    # SQLite devolve datetime sem fuso; gravamos sempre em UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CooldownGate:
    def __init__(self, db: Session) -> None:
        self._db = db

    def until(self, identity: str, tenant: str) -> datetime | None:
        row = self._db.get(Cooldown, session_key(identity, tenant))
        if row is None:
            return None
        return _as_utc(row.cooldown_until)

    def is_active(self, identity: str, tenant: str, now: datetime) -> bool:
        until = self.until(identity, tenant)
        return until is not None and _as_utc(now) < until

    def arm(self, identity: str, tenant: str, until: datetime) -> None:
        key = session_key(identity, tenant)
        row = self._db.get(Cooldown, key)
        if row is None:
            row = Cooldown(tenant=tenant, identity=identity)
            self._db.add(row)
        row.cooldown_until = _as_utc(until)
        self._db.flush()
