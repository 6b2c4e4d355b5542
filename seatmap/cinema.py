"""
Модель карты зала: генерация мест по конфигурации, выборка рядов,
переключение мест и статистика заполненности.

Все операции над картой возвращают новый словарь и не меняют исходный.
"""
from dataclasses import dataclass, replace
from typing import List, Optional

from seatmap.exceptions import SeatNotFoundError
from seatmap.models import CINEMA_CONFIG, BackRow, CinemaConfig, CinemaSection, Reservation, Seat, SeatMap

FILTER_MODES = ("all", "available", "selected")


def seat_key(section: CinemaSection, row: int, col: int) -> str:
    return f"{section.prefix}{row}-{col}"


def back_row_key(back_row: BackRow, col: int) -> str:
    return f"{back_row.prefix}-{col}"


def section_keys(section: CinemaSection) -> List[str]:
    return [
        seat_key(section, row, col)
        for row in range(1, section.rows + 1)
        for col in range(1, section.seats_per_row + 1)
    ]


def back_row_keys(back_row: BackRow) -> List[str]:
    return [back_row_key(back_row, col) for col in range(1, back_row.seats + 1)]


def layout_keys(config: CinemaConfig = CINEMA_CONFIG) -> List[str]:
    """Все ключи зала в порядке секций, затем задняя линия"""
    keys = []
    for section in config.sections:
        keys.extend(section_keys(section))
    keys.extend(back_row_keys(config.back_row))
    return keys


def generate_initial_seats(config: CinemaConfig = CINEMA_CONFIG) -> SeatMap:
    """Создает пустую карту: все места свободны"""
    return {key: Seat(id=key) for key in layout_keys(config)}


def reconcile_seats(config: CinemaConfig, seats: SeatMap) -> SeatMap:
    """
    Перестраивает карту под новую схему зала.

    Места, ключи которых есть в новой схеме, сохраняют состояние,
    новые места свободны, исчезнувшие удаляются.
    """
    result = {}
    for key in layout_keys(config):
        seat = seats.get(key)
        result[key] = replace(seat) if seat is not None else Seat(id=key)
    return result


def get_row_seats(section: CinemaSection, row: int, seats: SeatMap) -> List[Seat]:
    """Места ряда секции по возрастанию номера; отсутствующие ключи пропускаются"""
    return [
        seats[key]
        for key in (seat_key(section, row, col) for col in range(1, section.seats_per_row + 1))
        if key in seats
    ]


def get_back_row_seats(seats: SeatMap, config: CinemaConfig = CINEMA_CONFIG) -> List[Seat]:
    return [seats[key] for key in back_row_keys(config.back_row) if key in seats]


def visual_rows(config: CinemaConfig, seats: SeatMap) -> List[List[Seat]]:
    """Ряды зала для отрисовки: секции слева направо, последней идет задняя линия"""
    max_rows = max((s.rows for s in config.sections), default=0)
    rows = []
    for row in range(1, max_rows + 1):
        line = []
        for section in config.sections:
            line.extend(get_row_seats(section, row, seats))
        rows.append(line)
    rows.append(get_back_row_seats(seats, config))
    return rows


def filter_seats(seats: SeatMap, mode: str = "all") -> SeatMap:
    if mode not in FILTER_MODES:
        raise ValueError(f"Unknown filter {mode!r}, expected one of {FILTER_MODES}")
    if mode == "all":
        return dict(seats)
    wanted = mode == "selected"
    return {key: seat for key, seat in seats.items() if seat.selected == wanted}


def selected_seat_ids(seats: SeatMap) -> List[str]:
    return [key for key, seat in seats.items() if seat.selected]


def mismatched_seat_keys(seats: SeatMap) -> List[str]:
    """Ключи, под которыми лежит место с другим id"""
    return [key for key, seat in seats.items() if seat.id != key]


def toggle_seat(seats: SeatMap, key: str, reservation: Optional[Reservation] = None) -> SeatMap:
    """
    Переключает место.

    При выборе можно передать данные держателя брони, при снятии выбора
    бронь очищается. Неизвестный ключ - ошибка вызывающего кода.
    """
    seat = seats.get(key)
    if seat is None:
        raise SeatNotFoundError(key)

    if seat.selected:
        toggled = Seat(id=seat.id, selected=False)
    else:
        toggled = Seat(id=seat.id, selected=True, reservation=reservation)

    updated = dict(seats)
    updated[key] = toggled
    return updated


def select_all(seats: SeatMap) -> SeatMap:
    return {key: replace(seat, selected=True) for key, seat in seats.items()}


def deselect_all(seats: SeatMap) -> SeatMap:
    return {key: Seat(id=seat.id) for key, seat in seats.items()}


def occupancy_percent(part: int, whole: int) -> int:
    """Целый процент с округлением половины вверх; для пустого целого 0"""
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)


@dataclass
class SeatStats:
    selected: int
    available: int
    total: int

    @property
    def occupancy(self) -> int:
        return occupancy_percent(self.selected, self.total)


@dataclass
class SectionStats:
    name: str
    selected: int
    available: int
    total: int

    @property
    def occupancy(self) -> int:
        return occupancy_percent(self.selected, self.total)


@dataclass
class Analytics:
    stats: SeatStats
    sections: List[SectionStats]
    price: float

    @property
    def revenue(self) -> float:
        return self.stats.selected * self.price


def calculate_stats(seats: SeatMap) -> SeatStats:
    selected = sum(1 for seat in seats.values() if seat.selected)
    total = len(seats)
    return SeatStats(selected=selected, available=total - selected, total=total)


def _block_stats(name: str, keys: List[str], seats: SeatMap) -> SectionStats:
    selected = sum(1 for key in keys if key in seats and seats[key].selected)
    return SectionStats(name=name, selected=selected, available=len(keys) - selected, total=len(keys))


def calculate_section_stats(config: CinemaConfig, seats: SeatMap) -> List[SectionStats]:
    """Статистика по секциям; задняя линия считается отдельной секцией в конце"""
    result = [_block_stats(section.name, section_keys(section), seats) for section in config.sections]
    result.append(_block_stats(config.back_row.name, back_row_keys(config.back_row), seats))
    return result


def calculate_analytics(config: CinemaConfig, seats: SeatMap, price: Optional[float] = None) -> Analytics:
    return Analytics(
        stats=calculate_stats(seats),
        sections=calculate_section_stats(config, seats),
        price=config.price_per_seat if price is None else price,
    )

