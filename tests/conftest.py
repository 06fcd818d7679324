from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from camposanto import create_app
from camposanto.core.config import Config
from camposanto.core.extensions import db
from camposanto.core.models import (
    CemeteryPlot,
    CemeterySite,
    CemeterySubsector,
    Organization,
    seed_demo_data,
)


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    LOG_LEVEL = "WARNING"
    BURIAL_ASSIGN_REQUIRES_APPROVAL = False


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        seed_demo_data(db.session)
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, email: str, password: str):
    return client.post("/auth/login", json={"email": email, "password": password})


@pytest.fixture
def login_admin(client):
    def _do():
        return _login(client, "admin@cementerio.local", "admin123")

    return _do


@pytest.fixture
def login_operator(client):
    def _do():
        return _login(client, "operador@cementerio.local", "operador123")

    return _do


@pytest.fixture
def login_other_admin(client):
    def _do():
        return _login(client, "admin@otrocementerio.local", "admin123")

    return _do


@pytest.fixture
def login_funeral(client):
    def _do():
        return _login(client, "admin@funeraria.local", "admin123")

    return _do


@pytest.fixture
def demo(app):
    """Ids of the seeded cemetery tree, keyed by site code."""
    cemetery = Organization.query.filter_by(code="CEM-DEMO").first()
    other = Organization.query.filter_by(code="CEM-OTRO").first()
    funeral = Organization.query.filter_by(code="FUN-DEMO").first()
    ids: dict[str, object] = {
        "cemetery_org": cemetery.id,
        "other_org": other.id,
        "funeral_org": funeral.id,
    }
    for site in CemeterySite.query.all():
        subsector = (
            CemeterySubsector.query.join(CemeterySubsector.sector)
            .filter_by(area_id=site.areas[0].id)
            .first()
            if site.areas
            else None
        )
        plots = {}
        if subsector is not None:
            for plot in CemeteryPlot.query.filter_by(subsector_id=subsector.id).all():
                plots[plot.code] = {
                    "id": plot.id,
                    "spaces": [space.id for space in plot.spaces],
                }
        ids[site.code] = {
            "site": site.id,
            "area": site.areas[0].id if site.areas else None,
            "sector": subsector.sector_id if subsector else None,
            "subsector": subsector.id if subsector else None,
            "plots": plots,
        }
    return ids


@pytest.fixture
def select_site(client):
    def _do(site_id: int):
        return client.post("/org/select-site", json={"site_id": site_id})

    return _do
