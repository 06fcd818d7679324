from __future__ import annotations

from flask import jsonify, request

from camposanto.cemetery.deceased import public_search
from camposanto.public import public_bp


@public_bp.get("/deceased")
def deceased_search():
    term = request.args.get("q") or request.args.get("search") or ""
    return jsonify({"results": public_search(term)})
