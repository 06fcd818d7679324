from __future__ import annotations

from sqlalchemy import func

from camposanto.cemetery.ownership import scoped_query
from camposanto.core.models import CemeteryArea, CemeterySpace, SpaceStatus


def site_dashboard(site_id: int) -> dict[str, object]:
    counts = {
        "areas": CemeteryArea.query.filter_by(site_id=site_id).count(),
        "sectors": scoped_query("sector", site_id).count(),
        "subsectors": scoped_query("subsector", site_id).count(),
        "plots": scoped_query("plot", site_id).count(),
    }
    spaces = {status.value.lower(): 0 for status in SpaceStatus}
    rows = (
        scoped_query("space", site_id)
        .with_entities(CemeterySpace.status, func.count(CemeterySpace.id))
        .group_by(CemeterySpace.status)
        .all()
    )
    for status, total in rows:
        spaces[SpaceStatus(status).value.lower()] = total
    counts["spaces"] = spaces
    return counts
