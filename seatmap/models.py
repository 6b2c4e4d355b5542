from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Reservation:
    nombre: str
    apellido: str
    dni: str
    telefono: str


@dataclass
class Seat:
    id: str
    selected: bool = False
    reservation: Optional[Reservation] = None

    def __post_init__(self):
        # Данные держателя бывают только у выбранного места
        if self.reservation is not None and not self.selected:
            raise ValueError(f"Seat {self.id} is not selected but carries a reservation")

    @property
    def is_reserved(self) -> bool:
        return self.reservation is not None


SeatMap = Dict[str, Seat]


@dataclass
class CinemaSection:
    name: str
    rows: int
    seats_per_row: int
    prefix: str

    @property
    def total_seats(self) -> int:
        return max(self.rows, 0) * max(self.seats_per_row, 0)


@dataclass
class BackRow:
    name: str
    seats: int
    prefix: str

    @property
    def total_seats(self) -> int:
        return max(self.seats, 0)


@dataclass
class CinemaConfig:
    sections: List[CinemaSection]
    back_row: BackRow
    name: str = "Cine Principal"
    price_per_seat: float = 12

    @property
    def total_seats(self) -> int:
        """Всегда пересчитывается из размеров секций и задней линии"""
        return sum(s.total_seats for s in self.sections) + self.back_row.total_seats


@dataclass
class Showing:
    id: int
    title: str
    schedule: str
    price: float = 0
    seats: SeatMap = field(default_factory=dict)


# 139 мест, симметричный зал
CINEMA_CONFIG = CinemaConfig(
    sections=[
        CinemaSection(name="Lado Izquierdo Total", rows=7, seats_per_row=5, prefix="L"),
        CinemaSection(name="Zona Central Izquierda", rows=7, seats_per_row=4, prefix="CL"),
        CinemaSection(name="Zona Central Derecha", rows=7, seats_per_row=4, prefix="CR"),
        CinemaSection(name="Lado Derecho Total", rows=7, seats_per_row=5, prefix="R"),
    ],
    back_row=BackRow(name="Fila Trasera", seats=13, prefix="B"),
)
