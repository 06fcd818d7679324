from __future__ import annotations

import click
from flask import Flask, jsonify
from sqlalchemy import func
from werkzeug.exceptions import HTTPException

from camposanto.cemetery import cemetery_bp, deceased_bp, org_bp
from camposanto.core.auth import auth_bp
from camposanto.core.config import Config
from camposanto.core.errors import ServiceError
from camposanto.core.extensions import db, login_manager, migrate
from camposanto.core.i18n import translate
from camposanto.core.log import configure_logging, get_logger
from camposanto.core.models import CemeteryPlot, CemeterySpace, Organization, User, seed_demo_data
from camposanto.core.tenancy import load_tenant_context
from camposanto.funeral import funeral_bp
from camposanto.public import public_bp

logger = get_logger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "BAD_REQUEST",
}


def create_app(config_object: type[Config] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    configure_logging(app)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    app.before_request(load_tenant_context)

    app.register_blueprint(auth_bp)
    app.register_blueprint(org_bp)
    app.register_blueprint(cemetery_bp)
    app.register_blueprint(deceased_bp)
    app.register_blueprint(funeral_bp)
    app.register_blueprint(public_bp)

    register_cli(app)
    register_error_handlers(app)
    return app


def _error_response(code: str, status: int):
    return jsonify({"error": code, "message": translate(code)}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def service_error(error: ServiceError):
        if error.status >= 500:
            logger.error("Service failure: %s", error.code)
        return _error_response(error.code, error.status)

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        code = HTTP_ERROR_CODES.get(error.code or 500, "INTERNAL_ERROR")
        return _error_response(code, error.code or 500)


def register_cli(app: Flask) -> None:
    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Delete existing data before seed.")
    def seed_demo(reset: bool) -> None:
        """Seed demo organizations, sites and plots."""
        if reset:
            db.drop_all()
            db.create_all()
        if not Organization.query.first():
            seed_demo_data(db.session)
            click.echo("Demo data seeded.")
        else:
            click.echo("Seed skipped: existing organizations found.")

    @app.cli.command("spaces-audit")
    def spaces_audit() -> None:
        """List plots whose space rows do not match their capacity."""
        rows = (
            db.session.query(
                CemeteryPlot.id,
                CemeteryPlot.code,
                CemeteryPlot.capacity_spaces,
                func.count(CemeterySpace.id),
            )
            .outerjoin(CemeterySpace, CemeterySpace.plot_id == CemeteryPlot.id)
            .group_by(CemeteryPlot.id, CemeteryPlot.code, CemeteryPlot.capacity_spaces)
            .order_by(CemeteryPlot.id.asc())
            .all()
        )
        mismatched = [row for row in rows if row[2] != row[3]]
        for plot_id, code, capacity, spaces in mismatched:
            click.echo(f"[plot {plot_id}] code={code} capacity={capacity} spaces={spaces}")
        click.echo(f"Audited {len(rows)} plots, {len(mismatched)} mismatched.")


@login_manager.user_loader
def load_user(user_id: str) -> User | None:
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return _error_response("UNAUTHORIZED", 401)
