"""Sync status observer over the persistence collaborator.

The ledger never calls this module. It sits next to the ledger on the same
session and reports on it: pushing pending writes, re-reading from the
store, and probing whether the store is reachable. Every status change is
broadcast as a ``sync_status`` event on the ``/ws`` namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

IDLE = 'idle'
SYNCING = 'syncing'
SUCCESS = 'success'
ERROR = 'error'
UNAVAILABLE = 'unavailable'


@dataclass(frozen=True)
class SyncStatus:
    state: str
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {'state': self.state, 'detail': self.detail}


class SyncMonitor:
    """Tracks sync status for one application.

    Built once in ``create_app`` and reached through
    ``current_app.extensions['sync_monitor']``.
    """

    def __init__(self, db, socketio) -> None:
        self._db = db
        self._socketio = socketio
        self.status = SyncStatus(IDLE)
        self.last_sync: Optional[datetime] = None

    def _set(self, status: SyncStatus) -> SyncStatus:
        self.status = status
        if status.state == SUCCESS:
            self.last_sync = datetime.utcnow()
        self._socketio.emit('sync_status', status.to_dict(), namespace='/ws')
        return status

    def push(self) -> SyncStatus:
        """Write pending local changes to the store."""
        self._set(SyncStatus(SYNCING))
        try:
            self._db.session.commit()
        except SQLAlchemyError as exc:
            self._db.session.rollback()
            current_app.logger.error(f"[sync-push] failed: {exc}")
            return self._set(SyncStatus(ERROR, 'Changes not saved'))
        current_app.logger.info("[sync-push] ok")
        return self._set(SyncStatus(SUCCESS))

    def pull(self) -> SyncStatus:
        """Drop cached state so the next read observes the store."""
        self._set(SyncStatus(SYNCING))
        self._db.session.expire_all()
        current_app.logger.info("[sync-pull] ok")
        return self._set(SyncStatus(SUCCESS))

    def full_sync(self) -> SyncStatus:
        status = self.push()
        if status.state != SUCCESS:
            return status
        return self.pull()

    def probe(self) -> SyncStatus:
        """Check the store is reachable without changing anything."""
        try:
            self._db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as exc:
            self._db.session.rollback()
            current_app.logger.warning(f"[sync-probe] store unavailable: {exc}")
            return self._set(SyncStatus(UNAVAILABLE, str(exc)))
        if self.status.state == UNAVAILABLE:
            return self._set(SyncStatus(IDLE))
        return self.status

    def diagnostics(self) -> dict:
        from pubranker.models import Quiz, Round, Team

        report = {
            'status': self.status.to_dict(),
            'last_sync': self.last_sync.isoformat() if self.last_sync else None,
            'dialect': self._db.engine.dialect.name,
            'pending_changes': bool(self._db.session.new or self._db.session.dirty or self._db.session.deleted),
        }
        try:
            report['counts'] = {
                'quizzes': Quiz.query.count(),
                'rounds': Round.query.count(),
                'teams': Team.query.count(),
            }
        except SQLAlchemyError as exc:
            self._db.session.rollback()
            report['counts'] = None
            report['error'] = str(exc)
        return report
