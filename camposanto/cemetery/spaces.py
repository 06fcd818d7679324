from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from sqlalchemy import update

from camposanto.cemetery.ownership import require_in_site, resolve_in_site
from camposanto.core.errors import BadRequest, Conflict, NotFound
from camposanto.core.extensions import db
from camposanto.core.log import get_logger
from camposanto.core.models import CemeterySpace, SpaceStatus
from camposanto.core.transactions import transaction
from camposanto.core.utils import parse_id

logger = get_logger(__name__)

# Statuses that make a space unclaimable, with the conflict code each raises.
CLAIM_BLOCKING: dict[SpaceStatus, str] = {
    SpaceStatus.OCCUPIED: "SPACE_OCCUPIED",
    SpaceStatus.LOCKED: "SPACE_LOCKED",
}


def parse_space_status(value: object) -> SpaceStatus:
    """Statuses match exactly; "reserved" is not RESERVED."""
    raw = value if isinstance(value, str) else ""
    try:
        return SpaceStatus(raw)
    except ValueError:
        raise BadRequest("INVALID_STATUS") from None


def list_spaces(site_id: int, plot_id: object) -> list[CemeterySpace]:
    pid = parse_id(plot_id, "INVALID_PLOT_ID")
    plot = require_in_site("plot", site_id, pid)
    return (
        CemeterySpace.query.filter_by(plot_id=plot.id)
        .order_by(CemeterySpace.position.asc())
        .all()
    )


def ensure_space_in_site(
    site_id: int,
    space_id: object,
    plot_id: int | None = None,
    *,
    for_update: bool = False,
) -> CemeterySpace | None:
    sid = parse_id(space_id, "INVALID_SPACE_ID")
    return resolve_in_site("space", site_id, sid, plot_id=plot_id, for_update=for_update)


def set_space_status(
    space: CemeterySpace,
    status: SpaceStatus,
    notes: str | None = None,
    *,
    unless: Iterable[SpaceStatus] = (),
) -> bool:
    """Write ``status`` within the caller's transaction.

    No transition rules are checked here. ``unless`` turns the write into a
    compare-and-set that only applies while the stored status is not one of
    the given values; the return value says whether the row was written.
    """
    stmt = update(CemeterySpace).where(CemeterySpace.id == space.id)
    blocked = list(unless)
    if blocked:
        stmt = stmt.where(CemeterySpace.status.notin_(blocked))
    values: dict[str, object] = {"status": status}
    if notes is not None:
        values["notes"] = notes
    result = db.session.execute(stmt.values(**values).execution_options(synchronize_session="fetch"))
    return result.rowcount == 1


def update_space_status(site_id: int, space_id: object, payload: dict) -> CemeterySpace:
    sid = parse_id(space_id, "INVALID_SPACE_ID")
    status = parse_space_status(payload.get("status"))
    with transaction():
        space = ensure_space_in_site(site_id, sid, for_update=True)
        if space is None:
            raise NotFound("SPACE_NOT_FOUND")
        previous = space.status
        space.status = status
        if "notes" in payload:
            space.notes = payload.get("notes")
        db.session.add(space)
    logger.info("Space %s status %s -> %s (site %s)", sid, previous.value, status.value, site_id)
    return space


@contextmanager
def reserve_space(site_id: int, space_id: int | None, plot_id: int) -> Iterator[CemeterySpace | None]:
    """Claim a space for an owner record written inside the ``with`` block.

    Must run inside :func:`transaction`. The space is locked and checked on
    entry; on a clean exit it is flipped to OCCUPIED with a compare-and-set so
    that a competing claim committed in between makes this one fail.
    """
    if space_id is None:
        yield None
        return
    space = ensure_space_in_site(site_id, space_id, plot_id, for_update=True)
    if space is None:
        raise NotFound("SPACE_NOT_FOUND")
    blocking = CLAIM_BLOCKING.get(space.status)
    if blocking:
        raise Conflict(blocking)
    yield space
    if not set_space_status(space, SpaceStatus.OCCUPIED, unless=CLAIM_BLOCKING):
        raise Conflict("SPACE_OCCUPIED")


def release_space(space_id: int | None) -> None:
    if space_id is None:
        return
    space = db.session.get(CemeterySpace, space_id)
    if space is None:
        return
    set_space_status(space, SpaceStatus.AVAILABLE)
