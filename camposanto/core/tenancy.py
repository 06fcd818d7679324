from __future__ import annotations

from flask import abort, g, session
from flask_login import current_user

from camposanto.core.models import CemeterySite, Membership, OrganizationType


def load_tenant_context() -> None:
    g.org = None
    g.membership = None
    g.site = None
    if not current_user.is_authenticated:
        return
    query = Membership.query.filter_by(user_id=current_user.id)
    selected_org_id = session.get("org_id")
    if selected_org_id:
        query = query.filter_by(org_id=selected_org_id)
    membership = query.order_by(Membership.id.asc()).first()
    if membership is None:
        abort(403)
    g.org = membership.organization
    g.membership = membership

    site_id = session.get("site_id")
    if site_id and g.org.type == OrganizationType.CEMENTERIO:
        g.site = CemeterySite.query.filter_by(id=site_id, organization_id=g.org.id).first()
