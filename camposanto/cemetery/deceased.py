from __future__ import annotations

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from camposanto.cemetery.ownership import require_in_site
from camposanto.cemetery.spaces import release_space, reserve_space
from camposanto.core.errors import BadRequest, NotFound
from camposanto.core.extensions import db
from camposanto.core.log import get_logger
from camposanto.core.models import (
    CemeteryArea,
    CemeteryPlot,
    CemeterySector,
    CemeterySite,
    CemeterySubsector,
    DeceasedRecord,
    Organization,
)
from camposanto.core.transactions import transaction
from camposanto.core.utils import (
    clean_text,
    parse_id,
    parse_iso_date,
    parse_optional_id,
    parse_optional_iso_date,
)

logger = get_logger(__name__)

MIN_SEARCH_LENGTH = 2


def create_deceased(org_id: int, site_id: int, data: dict) -> DeceasedRecord:
    data = data or {}
    full_name = clean_text(data.get("full_name"))
    if not full_name:
        raise BadRequest("FULL_NAME_REQUIRED")
    date_of_death = parse_iso_date(data.get("date_of_death"), "DATE_OF_DEATH_REQUIRED", "INVALID_DATE")
    date_of_birth = parse_optional_iso_date(data.get("date_of_birth"), "INVALID_DATE")
    plot_id = parse_id(data.get("plot_id"), "INVALID_PLOT_ID")
    space_id = parse_optional_id(data.get("space_id"), "INVALID_SPACE_ID")

    with transaction():
        plot = require_in_site("plot", site_id, plot_id)
        with reserve_space(site_id, space_id, plot.id) as space:
            record = DeceasedRecord(
                organization_id=org_id,
                site_id=site_id,
                full_name=full_name,
                identifier=clean_text(data.get("identifier")),
                date_of_birth=date_of_birth,
                date_of_death=date_of_death,
                notes=clean_text(data.get("notes")),
                plot_id=plot.id,
                space_id=space.id if space is not None else None,
            )
            db.session.add(record)
            db.session.flush()
    logger.info("Deceased record %s created in plot %s space %s", record.id, plot_id, space_id)
    return record


def _records(org_id: int, site_id: int):
    return DeceasedRecord.query.options(
        joinedload(DeceasedRecord.plot),
        joinedload(DeceasedRecord.space),
    ).filter(
        DeceasedRecord.organization_id == org_id,
        DeceasedRecord.site_id == site_id,
    )


def list_deceased(org_id: int, site_id: int) -> list[DeceasedRecord]:
    return (
        _records(org_id, site_id)
        .order_by(DeceasedRecord.date_of_death.desc(), DeceasedRecord.id.desc())
        .all()
    )


def deceased_by_id(org_id: int, site_id: int, record_id: object) -> DeceasedRecord:
    rid = parse_id(record_id, "INVALID_DECEASED_ID")
    record = _records(org_id, site_id).filter(DeceasedRecord.id == rid).first()
    if record is None:
        raise NotFound("DECEASED_NOT_FOUND")
    return record


def delete_deceased(org_id: int, site_id: int, record_id: object) -> None:
    rid = parse_id(record_id, "INVALID_DECEASED_ID")
    with transaction():
        record = (
            DeceasedRecord.query.filter_by(id=rid, organization_id=org_id, site_id=site_id)
            .with_for_update()
            .first()
        )
        if record is None:
            raise NotFound("DECEASED_NOT_FOUND")
        space_id = record.space_id
        db.session.delete(record)
        db.session.flush()
        release_space(space_id)
    logger.info("Deceased record %s deleted, space %s released", rid, space_id)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def public_search(term: object) -> list[dict[str, object]]:
    """Search burials across every cemetery by name or national id."""
    text = term.strip() if isinstance(term, str) else ""
    if len(text) < MIN_SEARCH_LENGTH:
        return []
    pattern = _like_pattern(text)
    limit = current_app.config.get("PUBLIC_SEARCH_LIMIT", 50)
    rows = (
        db.session.query(
            DeceasedRecord.id,
            DeceasedRecord.full_name,
            DeceasedRecord.date_of_death,
            Organization.name.label("cemetery_name"),
            CemeterySite.name.label("site_name"),
            CemeteryArea.name.label("area_name"),
            CemeterySector.name.label("sector_name"),
            CemeterySubsector.name.label("subsector_name"),
            CemeteryPlot.code.label("plot_code"),
        )
        .join(Organization, Organization.id == DeceasedRecord.organization_id)
        .join(CemeterySite, CemeterySite.id == DeceasedRecord.site_id)
        .join(CemeteryPlot, CemeteryPlot.id == DeceasedRecord.plot_id)
        .join(CemeterySubsector, CemeterySubsector.id == CemeteryPlot.subsector_id)
        .join(CemeterySector, CemeterySector.id == CemeterySubsector.sector_id)
        .join(CemeteryArea, CemeteryArea.id == CemeterySector.area_id)
        .filter(
            or_(
                DeceasedRecord.full_name.ilike(pattern, escape="\\"),
                DeceasedRecord.identifier.ilike(pattern, escape="\\"),
            )
        )
        .order_by(DeceasedRecord.date_of_death.desc(), DeceasedRecord.full_name.asc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": row.id,
            "full_name": row.full_name,
            "date_of_death": row.date_of_death.isoformat() if row.date_of_death else None,
            "cemetery_name": row.cemetery_name,
            "site_name": row.site_name,
            "area_name": row.area_name,
            "sector_name": row.sector_name,
            "subsector_name": row.subsector_name,
            "plot_code": row.plot_code,
        }
        for row in rows
    ]
