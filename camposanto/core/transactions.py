from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from camposanto.core.errors import Conflict, InternalError, ServiceError
from camposanto.core.extensions import db
from camposanto.core.log import get_logger

logger = get_logger(__name__)


@contextmanager
def transaction() -> Iterator[None]:
    """Commit the session on success, roll back on any failure.

    Service errors raised inside the block keep their kind. Unique/foreign key
    violations surface as ``Conflict(DUPLICATE)`` and any other store failure
    as ``InternalError``.
    """
    try:
        yield
        db.session.commit()
    except ServiceError:
        db.session.rollback()
        raise
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("Integrity violation rolled back: %s", exc.orig)
        raise Conflict("DUPLICATE") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.exception("Unexpected store error, transaction rolled back")
        raise InternalError("INTERNAL_ERROR") from exc
    except Exception:
        db.session.rollback()
        raise
