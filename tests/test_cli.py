"""Command-line tests against the in-memory database."""

import json
from contextlib import contextmanager
from decimal import Decimal

import pytest

import main as cli
from models import UnitStatus


@pytest.fixture
def cli_db(monkeypatch, db):
    @contextmanager
    def session_context():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    monkeypatch.setattr(cli, "get_session_context", session_context)
    return db


class TestCommands:
    def test_price(self, cli_db, unit, capsys):
        assert cli.main(["price", str(unit.id)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert Decimal(output["total_price"]) == Decimal("11988000")
        assert output["premiums"][0]["type"] == "floor"

    def test_price_with_options(self, cli_db, unit, capsys):
        assert cli.main(["price", str(unit.id), "--options", '{"priceBasedOn": "carpet_area"}']) == 0

        assert json.loads(capsys.readouterr().out)["area_basis"] == "carpet_area"

    def test_price_rejects_bad_json(self, cli_db, unit, capsys):
        assert cli.main(["price", str(unit.id), "--options", "{not json"]) == 1

        assert "not valid JSON" in capsys.readouterr().err

    def test_lock_then_status(self, cli_db, unit, capsys):
        assert cli.main(["lock", str(unit.id), "agent-a", "--minutes", "15"]) == 0
        locked = json.loads(capsys.readouterr().out)
        assert locked["status"] == "locked"
        assert locked["locked_by"] == "agent-a"

        assert cli.main(["status", str(unit.id), "booked", "--booking-id", "BK-9"]) == 0
        booked = json.loads(capsys.readouterr().out)
        assert booked["status"] == "booked"
        assert booked["booking_id"] == "BK-9"

    def test_inventory_error_exits_with_one(self, cli_db, unit, capsys):
        assert cli.main(["release", str(unit.id)]) == 1

        assert "Cannot change unit" in capsys.readouterr().err
        assert cli_db.get(type(unit), unit.id).status == UnitStatus.AVAILABLE

    def test_invalid_unit_data_exits_with_one(self, cli_db, make_unit, capsys):
        unit = make_unit(additional_charges=[{"amount": 5000}])

        assert cli.main(["price", str(unit.id)]) == 1

        assert "invalid pricing data" in capsys.readouterr().err

    def test_unknown_unit(self, cli_db, capsys):
        assert cli.main(["lock", "404", "agent-a"]) == 1

        assert "Unit with ID 404 not found" in capsys.readouterr().err

    def test_reclaim_once(self, cli_db, unit, capsys):
        assert cli.main(["reclaim-once"]) == 0

        assert json.loads(capsys.readouterr().out) == {"released_count": 0}
