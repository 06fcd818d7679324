from __future__ import annotations

from camposanto.core.extensions import db
from camposanto.core.models import BurialRequest, BurialRequestStatus, CemeterySpace, SpaceStatus


def test_login_rejects_bad_credentials(client):
    response = client.post("/auth/login", json={"email": "admin@cementerio.local", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["error"] == "INVALID_CREDENTIALS"


def test_unauthenticated_requests_get_json_401(client):
    response = client.get("/org/cemetery/areas")
    assert response.status_code == 401
    assert response.get_json() == {"error": "UNAUTHORIZED", "message": "Autenticación requerida"}


def test_error_messages_follow_accept_language(client, login_admin):
    login_admin()
    response = client.get("/org/cemetery/areas", headers={"Accept-Language": "en"})
    assert response.status_code == 400
    assert response.get_json() == {"error": "NO_ACTIVE_SITE", "message": "No active site"}


def test_me_reports_active_org_and_site(client, login_admin, select_site, demo):
    login_admin()
    me = client.get("/auth/me").get_json()
    assert me["active_org_type"] == "CEMENTERIO"
    assert me["active_site"] is None
    assert me["role"] == "admin"

    assert select_site(demo["CENTRAL"]["site"]).status_code == 200
    assert client.get("/auth/me").get_json()["active_site"] == demo["CENTRAL"]["site"]


def test_select_site_rejects_other_organizations_site(client, login_admin, select_site, demo):
    login_admin()
    response = select_site(demo["GENERAL"]["site"])
    assert response.status_code == 404
    assert response.get_json()["error"] == "SITE_NOT_FOUND"

    missing = client.post("/org/select-site", json={})
    assert missing.status_code == 400
    assert missing.get_json()["error"] == "SITE_ID_REQUIRED"


def test_sites_listing_and_admin_only_creation(client, login_admin, login_operator, demo):
    login_operator()
    assert {row["code"] for row in client.get("/org/sites").get_json()} == {"CENTRAL", "ANEXO"}
    forbidden = client.post("/org/sites", json={"name": "Sede Norte"})
    assert forbidden.status_code == 403

    client.post("/auth/logout")
    login_admin()
    created = client.post("/org/sites", json={"name": "Sede Norte", "code": "NORTE"})
    assert created.status_code == 201
    assert created.get_json()["status"] == "ACTIVE"
    duplicate = client.post("/org/sites", json={"name": "Otra", "code": "NORTE"})
    assert duplicate.status_code == 409
    assert duplicate.get_json()["error"] == "DUPLICATE"


def test_funeral_org_cannot_use_cemetery_endpoints(client, login_funeral):
    login_funeral()
    response = client.get("/org/cemetery/dashboard")
    assert response.status_code == 403
    assert response.get_json()["error"] == "ORG_NOT_CEMETERY"


def test_cemetery_org_cannot_file_burial_requests(client, login_admin):
    login_admin()
    response = client.get("/org/funeral/burial-requests")
    assert response.status_code == 403
    assert response.get_json()["error"] == "ORG_NOT_FUNERAL"


def test_structure_endpoints(client, login_admin, select_site, demo):
    login_admin()
    select_site(demo["CENTRAL"]["site"])

    areas = client.get("/org/cemetery/areas").get_json()["areas"]
    assert [area["code"] for area in areas] == ["A"]

    created = client.post("/org/cemetery/areas", json={"code": "B", "name": "Área B"})
    assert created.status_code == 201
    area_id = created.get_json()["area"]["id"]

    patched = client.patch(f"/org/cemetery/areas/{area_id}", json={"description": "Ampliación"})
    assert patched.get_json()["area"]["name"] == "Área B"
    assert patched.get_json()["area"]["description"] == "Ampliación"

    sector = client.post(f"/org/cemetery/areas/{area_id}/sectors", json={"name": "Sector B1"}).get_json()["sector"]
    subsector = client.post(
        f"/org/cemetery/sectors/{sector['id']}/subsectors", json={"name": "Sub B1"}
    ).get_json()["subsector"]
    plot_types = client.get("/org/cemetery/plot-types").get_json()["plot_types"]
    mausoleo = next(row for row in plot_types if row["code"] == "MAUSOLEO")

    plot = client.post(
        f"/org/cemetery/subsectors/{subsector['id']}/plots",
        json={"plot_type_id": mausoleo["id"], "code": "M-1"},
    )
    assert plot.status_code == 201
    plot_id = plot.get_json()["plot"]["id"]
    spaces = client.get(f"/org/cemetery/plots/{plot_id}/spaces").get_json()["spaces"]
    assert [space["position"] for space in spaces] == [1, 2, 3, 4, 5, 6]

    bad_id = client.patch("/org/cemetery/areas/abc", json={"name": "X"})
    assert bad_id.status_code == 400
    assert bad_id.get_json()["error"] == "INVALID_AREA_ID"
    for raw_id in ("--5", "²"):
        malformed = client.patch(f"/org/cemetery/areas/{raw_id}", json={"name": "X"})
        assert malformed.status_code == 400
        assert malformed.get_json()["error"] == "INVALID_AREA_ID"

    foreign = client.get(f"/org/cemetery/areas/{demo['GENERAL']['area']}/sectors")
    assert foreign.status_code == 404
    assert foreign.get_json()["error"] == "AREA_NOT_FOUND"

    assert client.delete(f"/org/cemetery/areas/{area_id}").get_json() == {"message": "DELETED"}


def test_space_status_override_is_admin_only(app, client, login_admin, login_operator, select_site, demo):
    space_id = demo["CENTRAL"]["plots"]["N-1"]["spaces"][0]
    login_operator()
    select_site(demo["CENTRAL"]["site"])
    denied = client.patch(f"/org/cemetery/spaces/{space_id}/status", json={"status": "LOCKED"})
    assert denied.status_code == 403

    client.post("/auth/logout")
    login_admin()
    select_site(demo["CENTRAL"]["site"])
    response = client.patch(f"/org/cemetery/spaces/{space_id}/status", json={"status": "LOCKED"})
    assert response.status_code == 200
    assert response.get_json()["space"]["status"] == "LOCKED"

    invalid = client.patch(f"/org/cemetery/spaces/{space_id}/status", json={"status": "GONE"})
    assert invalid.status_code == 400
    assert invalid.get_json()["error"] == "INVALID_STATUS"


def test_burial_request_round_trip_between_tenants(app, client, login_admin, login_funeral, select_site, demo):
    login_funeral()
    cemeteries = client.get("/org/funeral/cemeteries").get_json()["cemeteries"]
    assert len(cemeteries) == 2
    filed = client.post(
        "/org/funeral/burial-requests",
        json={
            "deceased_full_name": "Gloria Torres Araya",
            "date_of_death": "2026-04-10",
            "cemetery_org_id": demo["cemetery_org"],
            "cemetery_site_id": demo["CENTRAL"]["site"],
        },
    )
    assert filed.status_code == 201
    request_id = filed.get_json()["request"]["id"]
    assert filed.get_json()["request"]["status"] == "PENDING"

    client.post("/auth/logout")
    login_admin()
    select_site(demo["CENTRAL"]["site"])
    listed = client.get("/org/cemetery/burial-requests").get_json()["requests"]
    assert request_id in {row["id"] for row in listed}

    approved = client.patch(f"/org/cemetery/burial-requests/{request_id}/approve")
    assert approved.get_json()["request"]["status"] == "APPROVED"

    missing = client.patch(f"/org/cemetery/burial-requests/{request_id}/assign-plot", json={"plot_id": 1})
    assert missing.status_code == 400
    assert missing.get_json()["error"] == "PLOT_AND_SPACE_REQUIRED"

    plot = demo["CENTRAL"]["plots"]["P-1"]
    assigned = client.patch(
        f"/org/cemetery/burial-requests/{request_id}/assign-plot",
        json={"plot_id": plot["id"], "space_id": plot["spaces"][2]},
    )
    assert assigned.status_code == 200
    assert assigned.get_json()["request"]["status"] == "ASSIGNED"

    seeded_id = BurialRequest.query.filter_by(deceased_full_name="Rosa Soto Fuentes").first().id
    conflict = client.patch(
        f"/org/cemetery/burial-requests/{seeded_id}/assign-plot",
        json={"plot_id": plot["id"], "space_id": plot["spaces"][2]},
    )
    assert conflict.status_code == 409
    assert conflict.get_json()["error"] == "SPACE_OCCUPIED"

    assert db.session.get(CemeterySpace, plot["spaces"][2]).status == SpaceStatus.OCCUPIED
    assert db.session.get(BurialRequest, seeded_id).status == BurialRequestStatus.PENDING

    dashboard = client.get("/org/cemetery/dashboard").get_json()
    assert dashboard["spaces"]["occupied"] == 2


def test_deceased_endpoints(client, login_admin, select_site, demo):
    login_admin()
    select_site(demo["CENTRAL"]["site"])
    plot = demo["CENTRAL"]["plots"]["N-1"]
    created = client.post(
        "/org/deceased",
        json={
            "full_name": "Héctor Araya Flores",
            "date_of_death": "2025-11-03",
            "plot_id": plot["id"],
            "space_id": plot["spaces"][0],
        },
    )
    assert created.status_code == 201
    record_id = created.get_json()["deceased"]["id"]

    again = client.post(
        "/org/deceased",
        json={"full_name": "Otro", "date_of_death": "2025-11-04", "plot_id": plot["id"], "space_id": plot["spaces"][0]},
    )
    assert again.status_code == 409

    listed = client.get("/org/deceased").get_json()["deceased"]
    assert record_id in {row["id"] for row in listed}
    assert client.get(f"/org/deceased/{record_id}").get_json()["deceased"]["space_status"] == "OCCUPIED"

    assert client.delete(f"/org/deceased/{record_id}").status_code == 200
    assert client.get(f"/org/deceased/{record_id}").status_code == 404


def test_public_search_needs_no_login(client):
    response = client.get("/public/deceased?q=gonz")
    assert response.status_code == 200
    assert [row["full_name"] for row in response.get_json()["results"]] == ["José González Silva"]
    assert client.get("/public/deceased?search=a").get_json() == {"results": []}


def test_cli_spaces_audit_reports_consistent_plots(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["spaces-audit"])
    assert result.exit_code == 0
    assert "Audited 4 plots, 0 mismatched." in result.output
