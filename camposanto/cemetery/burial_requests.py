"""Burial requests filed by funeral homes against a cemetery site.

A request references two organizations: the funeral home that filed it and
the cemetery that receives it. The cemetery approves, rejects or assigns a
concrete plot and space; assignment writes the request and claims the space
in one transaction.
"""
from __future__ import annotations

from flask import current_app
from sqlalchemy.orm import joinedload

from camposanto.cemetery.ownership import require_in_site
from camposanto.cemetery.spaces import reserve_space
from camposanto.core.errors import BadRequest, Conflict, NotFound
from camposanto.core.extensions import db
from camposanto.core.log import get_logger
from camposanto.core.models import (
    BurialRequest,
    BurialRequestStatus,
    CemeterySite,
    Organization,
    OrganizationType,
    PlotType,
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


def _cemetery_org(org_id: int) -> Organization:
    org = db.session.get(Organization, org_id)
    if org is None:
        raise NotFound("CEMETERY_ORG_NOT_FOUND")
    if org.type != OrganizationType.CEMENTERIO:
        raise BadRequest("INVALID_CEMETERY_ORG")
    return org


def _cemetery_site(org_id: int, site_id: int) -> CemeterySite:
    site = CemeterySite.query.filter_by(id=site_id, organization_id=org_id).first()
    if site is None:
        raise NotFound("CEMETERY_SITE_NOT_FOUND")
    return site


def create_burial_request(funeral_org_id: int, data: dict) -> BurialRequest:
    data = data or {}
    full_name = clean_text(data.get("deceased_full_name"))
    if not full_name:
        raise BadRequest("DECEASED_NAME_REQUIRED")
    if not data.get("date_of_death"):
        raise BadRequest("DATE_OF_DEATH_REQUIRED")
    if not data.get("cemetery_org_id"):
        raise BadRequest("CEMETERY_REQUIRED")
    if not data.get("cemetery_site_id"):
        raise BadRequest("CEMETERY_SITE_REQUIRED")

    cemetery_org_id = parse_id(data.get("cemetery_org_id"), "INVALID_CEMETERY")
    cemetery_site_id = parse_id(data.get("cemetery_site_id"), "INVALID_CEMETERY")
    date_of_death = parse_iso_date(data.get("date_of_death"), "DATE_OF_DEATH_REQUIRED", "INVALID_DATE")
    requested_date = parse_optional_iso_date(data.get("requested_date"), "INVALID_DATE")
    plot_type_id = parse_optional_id(data.get("requested_plot_type_id"), "INVALID_PLOT_TYPE_ID")

    with transaction():
        _cemetery_org(cemetery_org_id)
        _cemetery_site(cemetery_org_id, cemetery_site_id)
        if plot_type_id is not None and db.session.get(PlotType, plot_type_id) is None:
            raise BadRequest("PLOT_TYPE_NOT_FOUND")
        request = BurialRequest(
            funeral_org_id=funeral_org_id,
            cemetery_org_id=cemetery_org_id,
            cemetery_site_id=cemetery_site_id,
            deceased_full_name=full_name,
            date_of_death=date_of_death,
            requested_plot_type_id=plot_type_id,
            requested_date=requested_date,
            status=BurialRequestStatus.PENDING,
            notes=clean_text(data.get("notes")),
        )
        db.session.add(request)
    logger.info(
        "Burial request %s filed by organization %s for site %s",
        request.id,
        funeral_org_id,
        cemetery_site_id,
    )
    return request


def _with_parties(query):
    return query.options(
        joinedload(BurialRequest.funeral_org),
        joinedload(BurialRequest.cemetery_org),
        joinedload(BurialRequest.cemetery_site),
    )


def list_for_funeral_org(funeral_org_id: int) -> list[BurialRequest]:
    return (
        _with_parties(BurialRequest.query)
        .filter(BurialRequest.funeral_org_id == funeral_org_id)
        .order_by(BurialRequest.created_at.desc(), BurialRequest.id.desc())
        .all()
    )


def list_for_cemetery_org(cemetery_org_id: int, site_id: int | None = None) -> list[BurialRequest]:
    query = _with_parties(BurialRequest.query).filter(BurialRequest.cemetery_org_id == cemetery_org_id)
    if site_id is not None:
        query = query.filter(BurialRequest.cemetery_site_id == site_id)
    return query.order_by(BurialRequest.created_at.desc(), BurialRequest.id.desc()).all()


def list_cemeteries() -> list[dict[str, object]]:
    orgs = (
        Organization.query.filter_by(type=OrganizationType.CEMENTERIO)
        .order_by(Organization.name.asc())
        .all()
    )
    rows = []
    for org in orgs:
        sites = (
            CemeterySite.query.filter_by(organization_id=org.id)
            .order_by(CemeterySite.name.asc())
            .all()
        )
        rows.append(
            {
                "id": org.id,
                "name": org.name,
                "sites": [{"id": site.id, "name": site.name} for site in sites],
            }
        )
    return rows


def _owned_request(cemetery_org_id: int, request_id: int, *, for_update: bool = False) -> BurialRequest:
    query = BurialRequest.query.filter_by(id=request_id, cemetery_org_id=cemetery_org_id)
    if for_update:
        query = query.with_for_update()
    request = query.first()
    if request is None:
        raise NotFound("REQUEST_NOT_FOUND")
    return request


def approve(cemetery_org_id: int, request_id: object) -> BurialRequest:
    rid = parse_id(request_id, "INVALID_REQUEST_ID")
    with transaction():
        request = _owned_request(cemetery_org_id, rid, for_update=True)
        if request.status == BurialRequestStatus.ASSIGNED:
            raise Conflict("REQUEST_ALREADY_ASSIGNED")
        request.status = BurialRequestStatus.APPROVED
        db.session.add(request)
    logger.info("Burial request %s approved by organization %s", rid, cemetery_org_id)
    return request


def reject(cemetery_org_id: int, request_id: object, reason: object = None) -> BurialRequest:
    rid = parse_id(request_id, "INVALID_REQUEST_ID")
    reason_text = clean_text(reason)
    with transaction():
        request = _owned_request(cemetery_org_id, rid, for_update=True)
        if request.status == BurialRequestStatus.ASSIGNED:
            raise Conflict("REQUEST_ALREADY_ASSIGNED")
        request.status = BurialRequestStatus.REJECTED
        if reason_text is not None:
            request.notes = reason_text
        db.session.add(request)
    logger.info("Burial request %s rejected by organization %s", rid, cemetery_org_id)
    return request


def assign_plot(
    cemetery_org_id: int,
    site_id: int,
    request_id: object,
    plot_id: object,
    space_id: object,
) -> BurialRequest:
    """Assign a plot and space to a request, claiming the space.

    Either the request ends ASSIGNED and the space OCCUPIED, or neither row
    changes.
    """
    rid = parse_id(request_id, "INVALID_IDS")
    pid = parse_id(plot_id, "INVALID_IDS")
    sid = parse_id(space_id, "INVALID_IDS")
    requires_approval = current_app.config.get("BURIAL_ASSIGN_REQUIRES_APPROVAL", False)

    with transaction():
        request = _owned_request(cemetery_org_id, rid, for_update=True)
        if request.cemetery_site_id != site_id:
            raise BadRequest("SITE_MISMATCH")
        if request.status == BurialRequestStatus.ASSIGNED:
            raise Conflict("REQUEST_ALREADY_ASSIGNED")
        if requires_approval and request.status != BurialRequestStatus.APPROVED:
            raise Conflict("REQUEST_NOT_APPROVED")
        plot = require_in_site("plot", site_id, pid)
        with reserve_space(site_id, sid, plot.id) as space:
            request.assigned_plot_id = plot.id
            request.assigned_space_id = space.id
            request.status = BurialRequestStatus.ASSIGNED
            db.session.add(request)
            db.session.flush()
    logger.info(
        "Burial request %s assigned to plot %s space %s (site %s)",
        rid,
        pid,
        sid,
        site_id,
    )
    return request
