from __future__ import annotations

from camposanto.cemetery.ownership import KINDS, require_in_site, scoped_query
from camposanto.core.errors import BadRequest, Conflict, NotFound
from camposanto.core.extensions import db
from camposanto.core.log import get_logger
from camposanto.core.models import (
    CemeteryArea,
    CemeteryPlot,
    CemeterySector,
    CemeterySite,
    CemeterySpace,
    CemeterySubsector,
    DeceasedRecord,
    PlotType,
    SiteStatus,
    SpaceStatus,
)
from camposanto.core.transactions import transaction
from camposanto.core.utils import clean_text, parse_id

logger = get_logger(__name__)

NODE_FIELDS = ("code", "name", "description", "is_active")

# node kind -> (parent kind or None for the site, parent foreign key)
NODE_PARENTS: dict[str, tuple[str | None, str]] = {
    "area": (None, "site_id"),
    "sector": ("area", "area_id"),
    "subsector": ("sector", "sector_id"),
}


# Sites

def list_sites(org_id: int) -> list[CemeterySite]:
    return (
        CemeterySite.query.filter_by(organization_id=org_id)
        .order_by(CemeterySite.name.asc(), CemeterySite.id.asc())
        .all()
    )


def site_for_org(org_id: int, site_id: object) -> CemeterySite:
    sid = parse_id(site_id, "INVALID_SITE_ID")
    site = CemeterySite.query.filter_by(id=sid, organization_id=org_id).first()
    if not site:
        raise NotFound("SITE_NOT_FOUND")
    return site


def create_site(org_id: int, data: dict) -> CemeterySite:
    name = clean_text(data.get("name"))
    if not name:
        raise BadRequest("NAME_REQUIRED")
    status_raw = (clean_text(data.get("status")) or SiteStatus.ACTIVE.value).upper()
    try:
        status = SiteStatus(status_raw)
    except ValueError:
        raise BadRequest("INVALID_STATUS") from None
    with transaction():
        site = CemeterySite(
            organization_id=org_id,
            code=clean_text(data.get("code")),
            name=name,
            description=clean_text(data.get("description")),
            address=clean_text(data.get("address")),
            status=status,
        )
        db.session.add(site)
    logger.info("Site %s created for organization %s", site.id, org_id)
    return site


# Areas / sectors / subsectors

def _node_values(kind: str, data: dict, *, partial: bool) -> dict[str, object]:
    values: dict[str, object] = {}
    for key in NODE_FIELDS:
        if partial and key not in data:
            continue
        raw = data.get(key)
        if key == "is_active":
            if raw is None and not partial:
                continue
            if not isinstance(raw, bool):
                raise BadRequest("INVALID_IS_ACTIVE")
            values[key] = raw
        elif key == "name":
            name = clean_text(raw)
            if not name:
                raise BadRequest(f"{kind.upper()}_NAME_REQUIRED")
            values[key] = name
        else:
            values[key] = clean_text(raw)
    return values


def _parent_for(kind: str, site_id: int, parent_id: object):
    parent_kind, _ = NODE_PARENTS[kind]
    if parent_kind is None:
        return None
    pid = parse_id(parent_id, f"INVALID_{parent_kind.upper()}_ID")
    return require_in_site(parent_kind, site_id, pid)


def list_nodes(kind: str, site_id: int, parent_id: object = None) -> list:
    model = KINDS[kind]
    parent_kind, parent_key = NODE_PARENTS[kind]
    parent = _parent_for(kind, site_id, parent_id)
    parent_value = site_id if parent_kind is None else parent.id
    return (
        model.query.filter(getattr(model, parent_key) == parent_value)
        .order_by(model.name.asc(), model.id.asc())
        .all()
    )


def create_node(kind: str, site_id: int, parent_id: object, data: dict):
    model = KINDS[kind]
    parent_kind, parent_key = NODE_PARENTS[kind]
    values = _node_values(kind, data or {}, partial=False)
    with transaction():
        parent = _parent_for(kind, site_id, parent_id)
        values[parent_key] = site_id if parent_kind is None else parent.id
        node = model(**values)
        db.session.add(node)
    logger.info("Created %s %s under site %s", kind, node.id, site_id)
    return node


def update_node(kind: str, site_id: int, node_id: object, data: dict):
    nid = parse_id(node_id, f"INVALID_{kind.upper()}_ID")
    values = _node_values(kind, data or {}, partial=True)
    with transaction():
        node = require_in_site(kind, site_id, nid)
        for key, value in values.items():
            setattr(node, key, value)
        db.session.add(node)
    return node


def _node_in_use(kind: str, site_id: int, node_id: int) -> bool:
    model = KINDS[kind]
    occupied = (
        scoped_query("space", site_id)
        .filter(model.id == node_id)
        .filter(CemeterySpace.status == SpaceStatus.OCCUPIED)
        .count()
    )
    if occupied:
        return True
    deceased = (
        scoped_query("plot", site_id)
        .join(DeceasedRecord, DeceasedRecord.plot_id == CemeteryPlot.id)
        .filter(model.id == node_id)
        .count()
    )
    return deceased > 0


def delete_node(kind: str, site_id: int, node_id: object) -> None:
    nid = parse_id(node_id, f"INVALID_{kind.upper()}_ID")
    with transaction():
        node = require_in_site(kind, site_id, nid)
        if _node_in_use(kind, site_id, nid):
            raise Conflict("NODE_IN_USE")
        db.session.delete(node)
    logger.info("Deleted %s %s from site %s", kind, nid, site_id)


def list_areas(site_id: int) -> list[CemeteryArea]:
    return list_nodes("area", site_id)


def create_area(site_id: int, data: dict) -> CemeteryArea:
    return create_node("area", site_id, None, data)


def update_area(site_id: int, area_id: object, data: dict) -> CemeteryArea:
    return update_node("area", site_id, area_id, data)


def delete_area(site_id: int, area_id: object) -> None:
    delete_node("area", site_id, area_id)


def list_sectors(site_id: int, area_id: object) -> list[CemeterySector]:
    return list_nodes("sector", site_id, area_id)


def create_sector(site_id: int, area_id: object, data: dict) -> CemeterySector:
    return create_node("sector", site_id, area_id, data)


def update_sector(site_id: int, sector_id: object, data: dict) -> CemeterySector:
    return update_node("sector", site_id, sector_id, data)


def delete_sector(site_id: int, sector_id: object) -> None:
    delete_node("sector", site_id, sector_id)


def list_subsectors(site_id: int, sector_id: object) -> list[CemeterySubsector]:
    return list_nodes("subsector", site_id, sector_id)


def create_subsector(site_id: int, sector_id: object, data: dict) -> CemeterySubsector:
    return create_node("subsector", site_id, sector_id, data)


def update_subsector(site_id: int, subsector_id: object, data: dict) -> CemeterySubsector:
    return update_node("subsector", site_id, subsector_id, data)


def delete_subsector(site_id: int, subsector_id: object) -> None:
    delete_node("subsector", site_id, subsector_id)


# Plot types / plots

def list_plot_types() -> list[PlotType]:
    return PlotType.query.order_by(PlotType.id.asc()).all()


def _plot_capacity(requested: object, plot_type: PlotType) -> int:
    capacity = None
    if not isinstance(requested, bool):
        try:
            capacity = int(str(requested).strip())
        except (TypeError, ValueError):
            capacity = None
    if capacity is None or capacity <= 0:
        capacity = plot_type.default_capacity_spaces if plot_type.default_capacity_spaces > 0 else 1
    return capacity


def create_plot(site_id: int, subsector_id: object, data: dict) -> CemeteryPlot:
    ssid = parse_id(subsector_id, "INVALID_SUBSECTOR_ID")
    data = data or {}
    code = clean_text(data.get("code"))
    if not data.get("plot_type_id") or not code:
        raise BadRequest("PLOT_TYPE_AND_CODE_REQUIRED")
    plot_type_id = parse_id(data.get("plot_type_id"), "INVALID_PLOT_TYPE_ID")

    with transaction():
        subsector = require_in_site("subsector", site_id, ssid)
        plot_type = db.session.get(PlotType, plot_type_id)
        if plot_type is None:
            raise BadRequest("PLOT_TYPE_NOT_FOUND")
        capacity = _plot_capacity(data.get("capacity_spaces"), plot_type)
        plot = CemeteryPlot(
            subsector_id=subsector.id,
            plot_type_id=plot_type.id,
            code=code,
            row_label=clean_text(data.get("row_label")),
            column_label=clean_text(data.get("column_label")),
            capacity_spaces=capacity,
            is_active=True,
            notes=clean_text(data.get("notes")),
        )
        db.session.add(plot)
        db.session.flush()
        db.session.add_all(
            [
                CemeterySpace(plot_id=plot.id, position=position, status=SpaceStatus.AVAILABLE)
                for position in range(1, capacity + 1)
            ]
        )
    logger.info("Plot %s created with %s spaces (site %s)", plot.id, capacity, site_id)
    return plot


def list_plots(site_id: int, subsector_id: object) -> list[CemeteryPlot]:
    ssid = parse_id(subsector_id, "INVALID_SUBSECTOR_ID")
    subsector = require_in_site("subsector", site_id, ssid)
    return (
        CemeteryPlot.query.filter_by(subsector_id=subsector.id)
        .order_by(CemeteryPlot.code.asc(), CemeteryPlot.id.asc())
        .all()
    )


def delete_plot(site_id: int, plot_id: object) -> None:
    delete_node("plot", site_id, plot_id)
