from __future__ import annotations

from flask import Blueprint, g, jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user
from werkzeug.security import check_password_hash

from camposanto.core.errors import BadRequest, Forbidden
from camposanto.core.i18n import SUPPORTED_LANGS, translate
from camposanto.core.log import get_logger
from camposanto.core.models import Membership, User
from camposanto.core.permissions import require_membership
from camposanto.core.utils import parse_id

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
logger = get_logger(__name__)


def _payload() -> dict:
    return request.get_json(silent=True) or request.form.to_dict()


@auth_bp.post("/login")
def login_post():
    data = _payload()
    email = str(data.get("email", "")).strip().lower()
    password = str(data.get("password", ""))
    user = User.query.filter_by(email=email).first()
    if not user or not user.is_active or not check_password_hash(user.password_hash, password):
        logger.info("Rejected login for %s", email or "<empty>")
        return jsonify({"error": "INVALID_CREDENTIALS", "message": translate("INVALID_CREDENTIALS")}), 401
    session.pop("org_id", None)
    session.pop("site_id", None)
    login_user(user)
    return jsonify({"user": {"id": user.id, "email": user.email, "full_name": user.full_name}})


@auth_bp.post("/logout")
@login_required
def logout():
    logout_user()
    session.pop("org_id", None)
    session.pop("site_id", None)
    return jsonify({"message": "LOGGED_OUT"})


@auth_bp.get("/me")
@login_required
@require_membership
def me():
    memberships = Membership.query.filter_by(user_id=current_user.id).order_by(Membership.id.asc()).all()
    return jsonify(
        {
            "user": {"id": current_user.id, "email": current_user.email, "full_name": current_user.full_name},
            "active_org": g.org.id,
            "active_org_type": g.org.type.value,
            "active_site": g.site.id if g.site else None,
            "role": g.membership.role,
            "organizations": [
                {**m.organization.to_dict(), "role": m.role} for m in memberships
            ],
        }
    )


@auth_bp.post("/select-organization")
@login_required
def select_organization():
    org_id = parse_id(_payload().get("org_id"), "ORG_ID_REQUIRED")
    membership = Membership.query.filter_by(user_id=current_user.id, org_id=org_id).first()
    if membership is None:
        raise Forbidden("FORBIDDEN")
    session["org_id"] = org_id
    session.pop("site_id", None)
    return jsonify({"active_org": org_id, "active_org_type": membership.organization.type.value})


@auth_bp.post("/lang")
def set_lang():
    lang = str(_payload().get("lang", "es"))
    if lang not in SUPPORTED_LANGS:
        raise BadRequest("BAD_REQUEST")
    session["lang"] = lang
    return jsonify({"lang": lang})
