from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from pubranker import db


def save() -> bool:
    """Commit the session. On failure roll back, log and return False.

    Callers surface False as "changes not saved"; there is no retry.
    """
    try:
        db.session.commit()
        return True
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[save-failed] {exc.__class__.__name__}: {exc}")
        return False
