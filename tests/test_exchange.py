import json
from datetime import datetime, timezone

import pytest

from seatmap.cinema import generate_initial_seats, toggle_seat
from seatmap.exceptions import MalformedImportError
from seatmap.exchange import (
    export_cinema_map,
    export_filename,
    export_selection_csv,
    export_selection_json,
    import_cinema_map,
    parse_cinema_map,
)
from seatmap.models import CINEMA_CONFIG

EXPORTED_AT = datetime(2024, 3, 5, 18, 30, tzinfo=timezone.utc)


def test_export_payload(seats):
    seats = toggle_seat(seats, "L1-1")
    data = json.loads(export_cinema_map(seats, CINEMA_CONFIG, exported_at=EXPORTED_AT))

    assert set(data) == {"config", "seats", "stats", "exportedAt"}
    assert data["exportedAt"] == "2024-03-05T18:30:00Z"
    assert data["stats"] == {"selected": 1, "available": 138, "total": 139}
    assert data["config"]["totalSeats"] == 139
    assert data["config"]["backRow"] == {"name": "Fila Trasera", "seats": 13, "prefix": "B"}
    assert data["config"]["sections"][1]["seatsPerRow"] == 4
    assert data["seats"]["L1-1"] == {"id": "L1-1", "selected": True}


def test_export_includes_reservation(seats, reservation):
    seats = toggle_seat(seats, "B-3", reservation)
    data = json.loads(export_cinema_map(seats))
    assert data["seats"]["B-3"]["reserva"] == {
        "nombre": "Ana", "apellido": "Gómez", "dni": "30111222", "telefono": "555-0101",
    }
    assert "reserva" not in data["seats"]["B-4"]


def test_round_trip_keeps_seats(seats, reservation):
    seats = toggle_seat(seats, "CR2-2", reservation)
    seats = toggle_seat(seats, "R7-5")
    assert parse_cinema_map(export_cinema_map(seats)) == seats


def test_round_trip_of_three_selected_seats(seats):
    chosen = ["L3-2", "CL5-4", "B-13"]
    for key in chosen:
        seats = toggle_seat(seats, key)

    imported = import_cinema_map(export_cinema_map(seats))

    assert sorted(k for k, s in imported.items() if s.selected) == sorted(chosen)
    assert len(imported) == 139


def test_empty_object_falls_back_to_default_map():
    imported = import_cinema_map("{}")
    assert imported == generate_initial_seats()


@pytest.mark.parametrize("text", [
    "",
    "not json at all",
    "[1, 2, 3]",
    "{}",
    '{"config": {}}',
    '{"seats": []}',
    '{"seats": {"L1-1": {"id": "L1-1"}}}',
    '{"seats": {"L1-1": "yes"}}',
    '{"seats": {"L1-1": {"id": "L1-1", "selected": false, '
    '"reserva": {"nombre": "a", "apellido": "b", "dni": "c", "telefono": "d"}}}}',
    '{"seats": {"L1-1": {"id": "ZZ", "selected": true}}}',
])
def test_malformed_imports_are_reported(text):
    with pytest.raises(MalformedImportError):
        parse_cinema_map(text)
    assert import_cinema_map(text) == generate_initial_seats()


def test_import_keeps_partial_maps_as_given():
    imported = parse_cinema_map('{"seats": {"B-1": {"id": "B-1", "selected": true}}}')
    assert list(imported) == ["B-1"]
    assert imported["B-1"].selected


def test_selection_json():
    data = json.loads(export_selection_json(["L1-1", "B-2"], exported_at=EXPORTED_AT))
    assert data == {
        "selectedSeats": ["L1-1", "B-2"],
        "exportedAt": "2024-03-05T18:30:00Z",
        "format": "json",
    }


def test_selection_csv():
    assert export_selection_csv(["L1-1", "B-2"]) == "Butaca,Estado\nL1-1,Seleccionada\nB-2,Seleccionada"
    assert export_selection_csv([]) == "Butaca,Estado"


def test_export_filename():
    assert export_filename("map", "json", EXPORTED_AT) == "cinema-map-2024-03-05.json"
    assert export_filename("selection", "csv", EXPORTED_AT) == "cinema-selection-2024-03-05.csv"
