"""Tests for the typer command line."""

from typer.testing import CliRunner

from conftest import sample_trip
from tripkeeper.cli import create_app
from tripkeeper.core.db import init_db
from tripkeeper.core.storage import MemoryKeyValueStore
from tripkeeper.processing import obfuscation

runner = CliRunner()


def test_trips_lists_stored_trips():
    db = init_db(MemoryKeyValueStore())
    db.trips.create(sample_trip())

    result = runner.invoke(create_app(), ["trips"])
    assert result.exit_code == 0
    assert "Kyoto in autumn" in result.output


def test_unknown_status_is_an_error():
    init_db(MemoryKeyValueStore())
    result = runner.invoke(create_app(), ["trips", "--status", "someday"])
    assert result.exit_code == 1


def test_check_references():
    db = init_db(MemoryKeyValueStore())
    trip = db.trips.create(sample_trip())

    result = runner.invoke(create_app(), ["check-references"])
    assert result.exit_code == 0
    assert "No dangling references" in result.output

    db.meals.create({"tripId": trip.id, "type": "lunch", "restaurantName": "Izuju"})
    db.trips.delete(trip.id)
    result = runner.invoke(create_app(), ["check-references"])
    assert result.exit_code == 1
    assert "tripId" in result.output


def test_show_document_writes_image(tmp_path):
    db = init_db(MemoryKeyValueStore())
    document = db.documents.create(
        {"type": "passport", "documentImage": obfuscation.encode("data:image/png;base64,AAEC")}
    )
    out = tmp_path / "passport.png"

    result = runner.invoke(create_app(), ["show-document", document.id, "--out", str(out)])
    assert result.exit_code == 0
    assert out.read_bytes() == b"\x00\x01\x02"


def test_upload_command(tmp_path):
    from conftest import make_image_bytes

    db = init_db(MemoryKeyValueStore())
    album = db.albums.create({"title": "Kyoto"})
    image = tmp_path / "temple.png"
    image.write_bytes(make_image_bytes(40, 30))

    result = runner.invoke(create_app(), ["upload", album.id, str(image)])
    assert result.exit_code == 0
    assert db.albums.get_by_id(album.id).item_count == 1
