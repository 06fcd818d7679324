from __future__ import annotations

import pytest

from camposanto.cemetery.burial_requests import assign_plot
from camposanto.cemetery.deceased import (
    create_deceased,
    deceased_by_id,
    delete_deceased,
    list_deceased,
    public_search,
)
from camposanto.core.errors import BadRequest, Conflict, NotFound
from camposanto.core.extensions import db
from camposanto.core.models import (
    BurialRequest,
    BurialRequestStatus,
    CemeterySpace,
    DeceasedRecord,
    SpaceStatus,
)


def _payload(demo, **overrides):
    central = demo["CENTRAL"]
    data = {
        "full_name": "  Carmen Díaz Morales ",
        "identifier": "9.876.543-2",
        "date_of_birth": "1940-04-02",
        "date_of_death": "2025-08-20",
        "plot_id": central["plots"]["P-1"]["id"],
        "space_id": central["plots"]["P-1"]["spaces"][1],
    }
    data.update(overrides)
    return data


def test_create_deceased_claims_space_and_delete_releases_it(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        space_id = central["plots"]["P-1"]["spaces"][1]

        record = create_deceased(demo["cemetery_org"], central["site"], _payload(demo))
        assert record.full_name == "Carmen Díaz Morales"
        assert record.space_id == space_id
        assert db.session.get(CemeterySpace, space_id).status == SpaceStatus.OCCUPIED

        detail = deceased_by_id(demo["cemetery_org"], central["site"], record.id).to_dict()
        assert detail["plot_code"] == "P-1"
        assert detail["space_status"] == "OCCUPIED"
        assert detail["space_position"] == 2
        assert detail["area_name"] == "Área A"

        delete_deceased(demo["cemetery_org"], central["site"], record.id)
        assert db.session.get(DeceasedRecord, record.id) is None
        assert db.session.get(CemeterySpace, space_id).status == SpaceStatus.AVAILABLE


def test_create_deceased_on_occupied_space_inserts_nothing(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        occupied_id = central["plots"]["P-1"]["spaces"][0]
        before = DeceasedRecord.query.count()

        with pytest.raises(Conflict) as exc:
            create_deceased(demo["cemetery_org"], central["site"], _payload(demo, space_id=occupied_id))
        assert exc.value.code == "SPACE_OCCUPIED"
        assert DeceasedRecord.query.count() == before
        assert db.session.get(CemeterySpace, occupied_id).status == SpaceStatus.OCCUPIED


def _seeded_request_id() -> int:
    return BurialRequest.query.filter_by(deceased_full_name="Rosa Soto Fuentes").first().id


def test_space_assigned_to_request_cannot_take_a_deceased_record(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        plot = central["plots"]["N-1"]
        request_id = _seeded_request_id()
        assign_plot(demo["cemetery_org"], central["site"], request_id, plot["id"], plot["spaces"][0])
        before = DeceasedRecord.query.count()

        with pytest.raises(Conflict) as exc:
            create_deceased(
                demo["cemetery_org"],
                central["site"],
                _payload(demo, plot_id=plot["id"], space_id=plot["spaces"][0]),
            )
        assert exc.value.code == "SPACE_OCCUPIED"
        assert DeceasedRecord.query.count() == before
        assert db.session.get(CemeterySpace, plot["spaces"][0]).status == SpaceStatus.OCCUPIED
        request = db.session.get(BurialRequest, request_id)
        assert request.status == BurialRequestStatus.ASSIGNED
        assert request.assigned_space_id == plot["spaces"][0]


def test_space_holding_a_deceased_record_cannot_be_assigned(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        plot = central["plots"]["N-1"]
        record = create_deceased(
            demo["cemetery_org"],
            central["site"],
            _payload(demo, plot_id=plot["id"], space_id=plot["spaces"][0]),
        )
        request_id = _seeded_request_id()

        with pytest.raises(Conflict) as exc:
            assign_plot(demo["cemetery_org"], central["site"], request_id, plot["id"], plot["spaces"][0])
        assert exc.value.code == "SPACE_OCCUPIED"
        request = db.session.get(BurialRequest, request_id)
        assert request.status == BurialRequestStatus.PENDING
        assert request.assigned_plot_id is None
        assert request.assigned_space_id is None
        assert db.session.get(CemeterySpace, plot["spaces"][0]).status == SpaceStatus.OCCUPIED
        assert db.session.get(DeceasedRecord, record.id).space_id == plot["spaces"][0]

def test_create_deceased_without_space_touches_no_space(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        before = {space.id: space.status for space in CemeterySpace.query.all()}
        record = create_deceased(demo["cemetery_org"], central["site"], _payload(demo, space_id=None))
        assert record.space_id is None

        delete_deceased(demo["cemetery_org"], central["site"], record.id)
        assert {space.id: space.status for space in CemeterySpace.query.all()} == before


def test_create_deceased_validation(app, demo):
    with app.app_context():
        org_id = demo["cemetery_org"]
        site_id = demo["CENTRAL"]["site"]
        cases = (
            ({"full_name": "   "}, BadRequest, "FULL_NAME_REQUIRED"),
            ({"date_of_death": None}, BadRequest, "DATE_OF_DEATH_REQUIRED"),
            ({"date_of_death": "ayer"}, BadRequest, "INVALID_DATE"),
            ({"plot_id": "p-1"}, BadRequest, "INVALID_PLOT_ID"),
            ({"space_id": "x"}, BadRequest, "INVALID_SPACE_ID"),
            ({"plot_id": demo["GENERAL"]["plots"]["P-1"]["id"]}, NotFound, "PLOT_NOT_FOUND"),
            ({"space_id": demo["CENTRAL"]["plots"]["N-1"]["spaces"][0]}, NotFound, "SPACE_NOT_FOUND"),
        )
        for overrides, kind, code in cases:
            with pytest.raises(kind) as exc:
                create_deceased(org_id, site_id, _payload(demo, **overrides))
            assert exc.value.code == code
        assert DeceasedRecord.query.count() == 1


def test_deceased_records_are_scoped_to_org_and_site(app, demo):
    with app.app_context():
        seeded = DeceasedRecord.query.first()
        assert [row.id for row in list_deceased(demo["cemetery_org"], demo["CENTRAL"]["site"])] == [seeded.id]
        assert list_deceased(demo["cemetery_org"], demo["ANEXO"]["site"]) == []

        with pytest.raises(NotFound) as exc:
            deceased_by_id(demo["other_org"], demo["CENTRAL"]["site"], seeded.id)
        assert exc.value.code == "DECEASED_NOT_FOUND"

        with pytest.raises(NotFound):
            delete_deceased(demo["cemetery_org"], demo["ANEXO"]["site"], seeded.id)
        assert db.session.get(DeceasedRecord, seeded.id) is not None


def test_list_deceased_orders_by_date_of_death_desc(app, demo):
    with app.app_context():
        central = demo["CENTRAL"]
        create_deceased(demo["cemetery_org"], central["site"], _payload(demo, space_id=None, date_of_death="2020-01-01"))
        create_deceased(demo["cemetery_org"], central["site"], _payload(demo, space_id=None, date_of_death="2025-12-31"))
        dates = [row.date_of_death.isoformat() for row in list_deceased(demo["cemetery_org"], central["site"])]
        assert dates == ["2025-12-31", "2024-05-12", "2020-01-01"]


def test_public_search_bounds(app, demo):
    with app.app_context():
        assert public_search("") == []
        assert public_search(" j ") == []
        assert public_search(None) == []
        assert public_search("%%") == []

        rows = public_search("gonz")
        assert len(rows) == 1
        assert rows[0]["full_name"] == "José González Silva"
        assert rows[0]["cemetery_name"] == "Parque del Recuerdo Demo"
        assert rows[0]["site_name"] == "Sede Central"
        assert rows[0]["plot_code"] == "P-1"
        assert rows[0]["date_of_death"] == "2024-05-12"

        assert [row["id"] for row in public_search("345.678")] == [rows[0]["id"]]


def test_public_search_crosses_organizations_and_respects_limit(app, demo):
    with app.app_context():
        general = demo["GENERAL"]
        create_deceased(
            demo["other_org"],
            general["site"],
            {"full_name": "Teresa González", "date_of_death": "2023-01-01", "plot_id": general["plots"]["P-1"]["id"]},
        )
        names = [row["full_name"] for row in public_search("GONZ")]
        assert names == ["José González Silva", "Teresa González"]

        app.config["PUBLIC_SEARCH_LIMIT"] = 1
        assert len(public_search("gonz")) == 1
