"""Resolve cemetery entities under a site.

Every level of the tree (area, sector, subsector, plot, space) is reached by
walking the parent foreign keys up to ``cemetery_area.site_id``. All lookups
in the cemetery package go through :func:`scoped_query` so an entity that
belongs to another site (or another organization) is never returned.
"""
from __future__ import annotations

from sqlalchemy.orm import Query

from camposanto.core.errors import NotFound
from camposanto.core.models import (
    CemeteryArea,
    CemeteryPlot,
    CemeterySector,
    CemeterySite,
    CemeterySpace,
    CemeterySubsector,
)

KINDS: dict[str, type] = {
    "area": CemeteryArea,
    "sector": CemeterySector,
    "subsector": CemeterySubsector,
    "plot": CemeteryPlot,
    "space": CemeterySpace,
}

# child kind -> (parent kind, child foreign key to parent)
_PARENT_LINKS = {
    "sector": ("area", CemeterySector.area_id),
    "subsector": ("sector", CemeterySubsector.sector_id),
    "plot": ("subsector", CemeteryPlot.subsector_id),
    "space": ("plot", CemeterySpace.plot_id),
}


def scoped_query(kind: str, site_id: int, org_id: int | None = None) -> Query:
    model = KINDS[kind]
    query = model.query
    current = kind
    while current != "area":
        parent_kind, foreign_key = _PARENT_LINKS[current]
        parent = KINDS[parent_kind]
        query = query.join(parent, parent.id == foreign_key)
        current = parent_kind
    query = query.filter(CemeteryArea.site_id == site_id)
    if org_id is not None:
        query = query.join(CemeterySite, CemeterySite.id == CemeteryArea.site_id).filter(
            CemeterySite.organization_id == org_id
        )
    return query


def resolve_in_site(
    kind: str,
    site_id: int,
    entity_id: int,
    *,
    plot_id: int | None = None,
    org_id: int | None = None,
    for_update: bool = False,
):
    model = KINDS[kind]
    query = scoped_query(kind, site_id, org_id).filter(model.id == entity_id)
    if plot_id is not None:
        if kind != "space":
            raise ValueError("plot_id only constrains space lookups")
        query = query.filter(CemeterySpace.plot_id == plot_id)
    if for_update:
        query = query.with_for_update(of=model)
    return query.first()


def require_in_site(kind: str, site_id: int, entity_id: int, **kwargs):
    entity = resolve_in_site(kind, site_id, entity_id, **kwargs)
    if entity is None:
        raise NotFound(f"{kind.upper()}_NOT_FOUND")
    return entity
