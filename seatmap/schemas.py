from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Dict, List, Optional

from seatmap.logger import logger
from seatmap.models import BackRow, CinemaConfig, CinemaSection, Reservation, Seat, SeatMap


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ReservationSchema(CamelModel):
    nombre: str
    apellido: str
    dni: str
    telefono: str

    def to_model(self) -> Reservation:
        return Reservation(nombre=self.nombre, apellido=self.apellido, dni=self.dni, telefono=self.telefono)


class SeatSchema(CamelModel):
    id: str
    selected: bool
    reserva: Optional[ReservationSchema] = None

    @model_validator(mode="after")
    def reservation_requires_selection(self):
        if self.reserva is not None and not self.selected:
            raise ValueError(f"Seat {self.id} carries a reservation but is not selected")
        return self

    @classmethod
    def from_model(cls, seat: Seat) -> "SeatSchema":
        reserva = None
        if seat.reservation is not None:
            r = seat.reservation
            reserva = ReservationSchema(nombre=r.nombre, apellido=r.apellido, dni=r.dni, telefono=r.telefono)
        return cls(id=seat.id, selected=seat.selected, reserva=reserva)

    def to_model(self) -> Seat:
        return Seat(
            id=self.id,
            selected=self.selected,
            reservation=self.reserva.to_model() if self.reserva else None,
        )


class SectionSchema(CamelModel):
    name: str
    rows: int
    seats_per_row: int = Field(alias="seatsPerRow")
    prefix: str


class BackRowSchema(CamelModel):
    name: str
    seats: int
    prefix: str


class CinemaConfigSchema(CamelModel):
    name: str = "Cine Principal"
    price_per_seat: float = Field(default=12, alias="pricePerSeat")
    sections: List[SectionSchema]
    back_row: BackRowSchema = Field(alias="backRow")
    total_seats: Optional[int] = Field(default=None, alias="totalSeats")

    @classmethod
    def from_model(cls, config: CinemaConfig) -> "CinemaConfigSchema":
        return cls(
            name=config.name,
            price_per_seat=config.price_per_seat,
            sections=[
                SectionSchema(name=s.name, rows=s.rows, seats_per_row=s.seats_per_row, prefix=s.prefix)
                for s in config.sections
            ],
            back_row=BackRowSchema(name=config.back_row.name, seats=config.back_row.seats, prefix=config.back_row.prefix),
            total_seats=config.total_seats,
        )

    def to_model(self) -> CinemaConfig:
        config = CinemaConfig(
            name=self.name,
            price_per_seat=self.price_per_seat,
            sections=[
                CinemaSection(name=s.name, rows=s.rows, seats_per_row=s.seats_per_row, prefix=s.prefix)
                for s in self.sections
            ],
            back_row=BackRow(name=self.back_row.name, seats=self.back_row.seats, prefix=self.back_row.prefix),
        )
        if self.total_seats is not None and self.total_seats != config.total_seats:
            logger.warning(f"Declared totalSeats={self.total_seats} ignored, layout has {config.total_seats}")
        return config


class StatsSchema(CamelModel):
    selected: int
    available: int
    total: int


class OccupancySchema(StatsSchema):
    occupancy: int


class SectionStatsSchema(OccupancySchema):
    name: str


class AnalyticsSchema(CamelModel):
    stats: OccupancySchema
    sections: List[SectionStatsSchema]
    price: float
    revenue: float


class CinemaMapExport(CamelModel):
    config: CinemaConfigSchema
    seats: Dict[str, SeatSchema]
    stats: StatsSchema
    exported_at: str = Field(alias="exportedAt")


class CinemaMapImport(CamelModel):
    """Для импорта обязательны только места"""
    seats: Dict[str, SeatSchema]


class SelectionExport(CamelModel):
    selected_seats: List[str] = Field(alias="selectedSeats")
    exported_at: str = Field(alias="exportedAt")
    format: str = "json"


class ShowingSchema(CamelModel):
    id: int
    title: str
    schedule: str
    price: float


class CreateShowingSchema(CamelModel):
    title: str = "Nueva función"
    schedule: str = "00:00"
    price: float = 0


class UpdateShowingSchema(CamelModel):
    title: Optional[str] = None
    schedule: Optional[str] = None
    price: Optional[float] = None


class ToggleSeatSchema(CamelModel):
    reserva: Optional[ReservationSchema] = None


class ImportResultSchema(CamelModel):
    status: str
    message: str
    stats: StatsSchema


def seats_to_schema(seats: SeatMap) -> Dict[str, SeatSchema]:
    return {key: SeatSchema.from_model(seat) for key, seat in seats.items()}


def seats_from_schema(seats: Dict[str, SeatSchema]) -> SeatMap:
    return {key: seat.to_model() for key, seat in seats.items()}


class ShowingStateSchema(ShowingSchema):
    seats: Dict[str, SeatSchema]


class CinemaStateSchema(CamelModel):
    config: CinemaConfigSchema
    showings: List[ShowingStateSchema]


class UpdateSectionSchema(CamelModel):
    name: Optional[str] = None
    rows: Optional[int] = None
    seats_per_row: Optional[int] = Field(default=None, alias="seatsPerRow")


class AddSectionSchema(CamelModel):
    name: Optional[str] = None
    rows: int = 7
    seats_per_row: int = Field(default=4, alias="seatsPerRow")
    prefix: Optional[str] = None
