from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request, session
from flask_login import login_required

from camposanto.cemetery import cemetery_bp, deceased_bp, org_bp
from camposanto.cemetery.burial_requests import (
    approve,
    assign_plot,
    list_for_cemetery_org,
    reject,
)
from camposanto.cemetery.dashboard import site_dashboard
from camposanto.cemetery.deceased import (
    create_deceased,
    deceased_by_id,
    delete_deceased,
    list_deceased,
)
from camposanto.cemetery.spaces import list_spaces, update_space_status
from camposanto.cemetery.structure import (
    create_area,
    create_plot,
    create_sector,
    create_site,
    create_subsector,
    delete_area,
    delete_plot,
    delete_sector,
    delete_subsector,
    list_areas,
    list_plot_types,
    list_plots,
    list_sectors,
    list_sites,
    list_subsectors,
    site_for_org,
    update_area,
    update_sector,
    update_subsector,
)
from camposanto.core.errors import BadRequest
from camposanto.core.models import OrganizationType
from camposanto.core.permissions import (
    require_membership,
    require_org_type,
    require_role,
    require_site,
)


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def site_scoped(fn):
    """Cemetery member with an active site selected."""

    @wraps(fn)
    @login_required
    @require_membership
    @require_org_type(OrganizationType.CEMENTERIO)
    @require_site
    def wrapper(*args, **kwargs):
        return fn(*args, **kwargs)

    return wrapper


def _deleted():
    return jsonify({"message": "DELETED"})


# Sites

@org_bp.get("/sites")
@login_required
@require_membership
@require_org_type(OrganizationType.CEMENTERIO)
def sites_index():
    return jsonify([site.to_dict() for site in list_sites(g.org.id)])


@org_bp.post("/sites")
@login_required
@require_membership
@require_org_type(OrganizationType.CEMENTERIO)
@require_role("admin")
def sites_create():
    site = create_site(g.org.id, _payload())
    return jsonify(site.to_dict()), 201


@org_bp.post("/select-site")
@login_required
@require_membership
@require_org_type(OrganizationType.CEMENTERIO)
def select_site():
    data = _payload()
    site_id = data.get("site_id") or data.get("siteId")
    if not site_id:
        raise BadRequest("SITE_ID_REQUIRED")
    site = site_for_org(g.org.id, site_id)
    session["site_id"] = site.id
    return jsonify({"active_org": g.org.id, "active_site": site.id, "site": site.to_dict()})


# Areas / sectors / subsectors

@cemetery_bp.get("/areas")
@site_scoped
def areas_index():
    return jsonify({"areas": [area.to_dict() for area in list_areas(g.site.id)]})


@cemetery_bp.post("/areas")
@site_scoped
def areas_create():
    return jsonify({"area": create_area(g.site.id, _payload()).to_dict()}), 201


@cemetery_bp.patch("/areas/<area_id>")
@site_scoped
def areas_update(area_id: str):
    return jsonify({"area": update_area(g.site.id, area_id, _payload()).to_dict()})


@cemetery_bp.delete("/areas/<area_id>")
@site_scoped
def areas_delete(area_id: str):
    delete_area(g.site.id, area_id)
    return _deleted()


@cemetery_bp.get("/areas/<area_id>/sectors")
@site_scoped
def sectors_index(area_id: str):
    return jsonify({"sectors": [sector.to_dict() for sector in list_sectors(g.site.id, area_id)]})


@cemetery_bp.post("/areas/<area_id>/sectors")
@site_scoped
def sectors_create(area_id: str):
    return jsonify({"sector": create_sector(g.site.id, area_id, _payload()).to_dict()}), 201


@cemetery_bp.patch("/sectors/<sector_id>")
@site_scoped
def sectors_update(sector_id: str):
    return jsonify({"sector": update_sector(g.site.id, sector_id, _payload()).to_dict()})


@cemetery_bp.delete("/sectors/<sector_id>")
@site_scoped
def sectors_delete(sector_id: str):
    delete_sector(g.site.id, sector_id)
    return _deleted()


@cemetery_bp.get("/sectors/<sector_id>/subsectors")
@site_scoped
def subsectors_index(sector_id: str):
    rows = list_subsectors(g.site.id, sector_id)
    return jsonify({"subsectors": [subsector.to_dict() for subsector in rows]})


@cemetery_bp.post("/sectors/<sector_id>/subsectors")
@site_scoped
def subsectors_create(sector_id: str):
    subsector = create_subsector(g.site.id, sector_id, _payload())
    return jsonify({"subsector": subsector.to_dict()}), 201


@cemetery_bp.patch("/subsectors/<subsector_id>")
@site_scoped
def subsectors_update(subsector_id: str):
    subsector = update_subsector(g.site.id, subsector_id, _payload())
    return jsonify({"subsector": subsector.to_dict()})


@cemetery_bp.delete("/subsectors/<subsector_id>")
@site_scoped
def subsectors_delete(subsector_id: str):
    delete_subsector(g.site.id, subsector_id)
    return _deleted()


# Plots / spaces

@cemetery_bp.get("/plot-types")
@site_scoped
def plot_types_index():
    return jsonify({"plot_types": [plot_type.to_dict() for plot_type in list_plot_types()]})


@cemetery_bp.get("/subsectors/<subsector_id>/plots")
@site_scoped
def plots_index(subsector_id: str):
    return jsonify({"plots": [plot.to_dict() for plot in list_plots(g.site.id, subsector_id)]})


@cemetery_bp.post("/subsectors/<subsector_id>/plots")
@site_scoped
def plots_create(subsector_id: str):
    plot = create_plot(g.site.id, subsector_id, _payload())
    return jsonify({"plot": plot.to_dict()}), 201


@cemetery_bp.delete("/plots/<plot_id>")
@site_scoped
def plots_delete(plot_id: str):
    delete_plot(g.site.id, plot_id)
    return _deleted()


@cemetery_bp.get("/plots/<plot_id>/spaces")
@site_scoped
def spaces_index(plot_id: str):
    return jsonify({"spaces": [space.to_dict() for space in list_spaces(g.site.id, plot_id)]})


@cemetery_bp.patch("/spaces/<space_id>/status")
@site_scoped
@require_role("admin")
def spaces_status(space_id: str):
    space = update_space_status(g.site.id, space_id, _payload())
    return jsonify({"space": space.to_dict()})


@cemetery_bp.get("/dashboard")
@site_scoped
def dashboard():
    return jsonify(site_dashboard(g.site.id))


# Burial requests received

@cemetery_bp.get("/burial-requests")
@site_scoped
def burial_requests_index():
    rows = list_for_cemetery_org(g.org.id, g.site.id)
    return jsonify({"requests": [row.to_dict() for row in rows]})


@cemetery_bp.patch("/burial-requests/<request_id>/approve")
@site_scoped
def burial_requests_approve(request_id: str):
    return jsonify({"request": approve(g.org.id, request_id).to_dict()})


@cemetery_bp.patch("/burial-requests/<request_id>/reject")
@site_scoped
def burial_requests_reject(request_id: str):
    result = reject(g.org.id, request_id, _payload().get("reason"))
    return jsonify({"request": result.to_dict()})


@cemetery_bp.patch("/burial-requests/<request_id>/assign-plot")
@site_scoped
def burial_requests_assign(request_id: str):
    data = _payload()
    if not data.get("plot_id") or not data.get("space_id"):
        raise BadRequest("PLOT_AND_SPACE_REQUIRED")
    result = assign_plot(g.org.id, g.site.id, request_id, data.get("plot_id"), data.get("space_id"))
    return jsonify({"request": result.to_dict()})


# Deceased records

@deceased_bp.post("")
@site_scoped
def deceased_create():
    record = create_deceased(g.org.id, g.site.id, _payload())
    return jsonify({"deceased": record.to_dict()}), 201


@deceased_bp.get("")
@site_scoped
def deceased_index():
    return jsonify({"deceased": [record.to_dict() for record in list_deceased(g.org.id, g.site.id)]})


@deceased_bp.get("/<record_id>")
@site_scoped
def deceased_detail(record_id: str):
    return jsonify({"deceased": deceased_by_id(g.org.id, g.site.id, record_id).to_dict()})


@deceased_bp.delete("/<record_id>")
@site_scoped
def deceased_delete(record_id: str):
    delete_deceased(g.org.id, g.site.id, record_id)
    return _deleted()
