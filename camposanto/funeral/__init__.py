from flask import Blueprint

funeral_bp = Blueprint("funeral", __name__, url_prefix="/org/funeral")

from camposanto.funeral import routes  # noqa: E402,F401
