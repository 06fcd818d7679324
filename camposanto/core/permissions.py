from __future__ import annotations

from functools import wraps

from flask import abort, g
from flask_login import current_user

from camposanto.core.errors import BadRequest, Forbidden
from camposanto.core.models import OrganizationType


def require_membership(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            abort(401)
        if getattr(g, "org", None) is None:
            raise BadRequest("NO_ACTIVE_ORGANIZATION")
        return fn(*args, **kwargs)

    return wrapper


def require_role(role: str):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                abort(401)
            membership = getattr(g, "membership", None)
            if membership is None:
                raise Forbidden("FORBIDDEN")
            if (membership.role or "").lower() != role.lower():
                raise Forbidden("FORBIDDEN")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


_ORG_TYPE_ERRORS = {
    OrganizationType.CEMENTERIO: "ORG_NOT_CEMETERY",
    OrganizationType.FUNERARIA: "ORG_NOT_FUNERAL",
}


def require_org_type(org_type: OrganizationType):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            org = getattr(g, "org", None)
            if org is None or org.type != org_type:
                raise Forbidden(_ORG_TYPE_ERRORS[org_type])
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_site(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "site", None) is None:
            raise BadRequest("NO_ACTIVE_SITE")
        return fn(*args, **kwargs)

    return wrapper
