import os
import tempfile

import pytest

# Логи тестов не должны попадать в рабочий каталог
os.environ.setdefault("SEATMAP_LOG_DIR", tempfile.mkdtemp(prefix="seatmap-logs-"))
os.environ.setdefault("SEATMAP_DATA_DIR", tempfile.mkdtemp(prefix="seatmap-data-"))
os.environ["SEATMAP_REMOTE_URL"] = ""

from seatmap import logging_service  # noqa: E402
from seatmap.cinema import generate_initial_seats  # noqa: E402
from seatmap.models import CINEMA_CONFIG, BackRow, CinemaConfig, CinemaSection, Reservation  # noqa: E402


@pytest.fixture(autouse=True)
def action_log(tmp_path, monkeypatch):
    path = tmp_path / "user_actions.log"
    monkeypatch.setattr(logging_service, "LOG_FILE", path)
    return path


@pytest.fixture
def seats():
    return generate_initial_seats(CINEMA_CONFIG)


@pytest.fixture
def small_config():
    return CinemaConfig(
        sections=[
            CinemaSection(name="Left", rows=2, seats_per_row=3, prefix="A"),
            CinemaSection(name="Right", rows=3, seats_per_row=2, prefix="Z"),
        ],
        back_row=BackRow(name="Back", seats=4, prefix="K"),
        name="Sala 2",
        price_per_seat=10,
    )


@pytest.fixture
def reservation():
    return Reservation(nombre="Ana", apellido="Gómez", dni="30111222", telefono="555-0101")
