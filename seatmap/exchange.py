"""Экспорт и импорт карты зала, выгрузка выбранных мест в JSON и CSV."""
import csv
import io
import json
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import ValidationError

from seatmap.cinema import calculate_stats, generate_initial_seats, mismatched_seat_keys
from seatmap.exceptions import MalformedImportError
from seatmap.logger import logger
from seatmap.models import CINEMA_CONFIG, CinemaConfig, SeatMap
from seatmap.schemas import (
    CinemaConfigSchema,
    CinemaMapExport,
    CinemaMapImport,
    SelectionExport,
    StatsSchema,
    seats_from_schema,
    seats_to_schema,
)

CSV_HEADER = ("Butaca", "Estado")
CSV_SELECTED_LABEL = "Seleccionada"


def _timestamp(when: Optional[datetime] = None) -> str:
    when = when or datetime.now(timezone.utc)
    return when.isoformat().replace("+00:00", "Z")


def export_filename(kind: str, ext: str, when: Optional[datetime] = None) -> str:
    """cinema-map-2024-01-31.json, cinema-selection-2024-01-31.csv"""
    when = when or datetime.now(timezone.utc)
    return f"cinema-{kind}-{when.strftime('%Y-%m-%d')}.{ext}"


def export_cinema_map(seats: SeatMap, config: CinemaConfig = CINEMA_CONFIG, exported_at: Optional[datetime] = None) -> str:
    stats = calculate_stats(seats)
    payload = CinemaMapExport(
        config=CinemaConfigSchema.from_model(config),
        seats=seats_to_schema(seats),
        stats=StatsSchema(selected=stats.selected, available=stats.available, total=stats.total),
        exported_at=_timestamp(exported_at),
    )
    data = payload.model_dump(by_alias=True, exclude_none=True)
    return json.dumps(data, ensure_ascii=False, indent=2)


def parse_cinema_map(text: str) -> SeatMap:
    """
    Разбирает выгрузку карты и возвращает места.

    Бросает MalformedImportError, если текст не JSON-объект, в нем нет
    поля seats или какое-то место описано неверно.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise MalformedImportError(f"Import is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise MalformedImportError("Import must be a JSON object")
    if "seats" not in data:
        raise MalformedImportError("Import has no seats field")

    try:
        parsed = CinemaMapImport.model_validate({"seats": data["seats"]})
    except ValidationError as e:
        raise MalformedImportError(f"Import has invalid seats: {e.error_count()} error(s)")

    seats = seats_from_schema(parsed.seats)
    mismatched = mismatched_seat_keys(seats)
    if mismatched:
        raise MalformedImportError(f"Seat ids do not match their keys: {', '.join(mismatched)}")

    return seats


def import_cinema_map(text: str, config: CinemaConfig = CINEMA_CONFIG) -> SeatMap:
    """Как parse_cinema_map, но при ошибке возвращает новую пустую карту"""
    try:
        return parse_cinema_map(text)
    except MalformedImportError as e:
        logger.error(f"Error importing cinema map: {e.message}")
        return generate_initial_seats(config)


def export_selection_json(selected_ids: List[str], exported_at: Optional[datetime] = None) -> str:
    payload = SelectionExport(selected_seats=list(selected_ids), exported_at=_timestamp(exported_at))
    return json.dumps(payload.model_dump(by_alias=True), ensure_ascii=False, indent=2)


def export_selection_csv(selected_ids: List[str]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for seat_id in selected_ids:
        writer.writerow((seat_id, CSV_SELECTED_LABEL))
    return buf.getvalue().rstrip("\n")
