from flask import Blueprint

cemetery_bp = Blueprint("cemetery", __name__, url_prefix="/org/cemetery")
deceased_bp = Blueprint("deceased", __name__, url_prefix="/org/deceased")
org_bp = Blueprint("org", __name__, url_prefix="/org")

from camposanto.cemetery import routes  # noqa: E402,F401
