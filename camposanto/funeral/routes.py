from __future__ import annotations

from functools import wraps

from flask import g, jsonify, request
from flask_login import login_required

from camposanto.cemetery.burial_requests import (
    create_burial_request,
    list_cemeteries,
    list_for_funeral_org,
)
from camposanto.cemetery.structure import list_plot_types
from camposanto.core.models import OrganizationType
from camposanto.core.permissions import require_membership, require_org_type
from camposanto.funeral import funeral_bp


def funeral_member(fn):
    @wraps(fn)
    @login_required
    @require_membership
    @require_org_type(OrganizationType.FUNERARIA)
    def wrapper(*args, **kwargs):
        return fn(*args, **kwargs)

    return wrapper


@funeral_bp.get("/burial-requests")
@funeral_member
def burial_requests_index():
    rows = list_for_funeral_org(g.org.id)
    return jsonify({"requests": [row.to_dict() for row in rows]})


@funeral_bp.post("/burial-requests")
@funeral_member
def burial_requests_create():
    created = create_burial_request(g.org.id, request.get_json(silent=True) or {})
    return jsonify({"request": created.to_dict()}), 201


@funeral_bp.get("/cemeteries")
@funeral_member
def cemeteries_index():
    return jsonify({"cemeteries": list_cemeteries()})


@funeral_bp.get("/plot-types")
@funeral_member
def plot_types_index():
    return jsonify({"plot_types": [plot_type.to_dict() for plot_type in list_plot_types()]})
