from typing import Dict, List, Optional

from seatmap.cinema import generate_initial_seats, reconcile_seats
from seatmap.exceptions import LastShowingError, ShowingNotFoundError
from seatmap.logger import logger
from seatmap.models import CinemaConfig, SeatMap, Showing


class ShowingBook:
    """Сеансы; у каждого своя карта мест"""

    def __init__(self, showings: Optional[List[Showing]] = None):
        self.showings: Dict[int, Showing] = {}
        for showing in showings or []:
            self.showings[showing.id] = showing

    @classmethod
    def default(cls, config: CinemaConfig) -> "ShowingBook":
        book = cls()
        book.add(config, title="El Exorcista", schedule="Viernes 21:00", price=1200)
        return book

    def __len__(self):
        return len(self.showings)

    def all(self) -> List[Showing]:
        return list(self.showings.values())

    def get(self, showing_id: int) -> Showing:
        showing = self.showings.get(showing_id)
        if showing is None:
            raise ShowingNotFoundError(showing_id)
        return showing

    def add(self, config: CinemaConfig, title: str = "Nueva función", schedule: str = "00:00",
            price: float = 0) -> Showing:
        new_id = max(self.showings.keys()) + 1 if self.showings else 1

        # У КАЖДОГО СЕАНСА СВОИ МЕСТА
        showing = Showing(
            id=new_id,
            title=title,
            schedule=schedule,
            price=price,
            seats=generate_initial_seats(config)
        )
        self.showings[new_id] = showing
        logger.info(f"Showing created: {showing.id} '{showing.title}' ({len(showing.seats)} seats)")
        return showing

    def update(self, showing_id: int, title: Optional[str] = None, schedule: Optional[str] = None,
               price: Optional[float] = None) -> Showing:
        showing = self.get(showing_id)
        if title is not None:
            showing.title = title
        if schedule is not None:
            showing.schedule = schedule
        if price is not None:
            showing.price = price
        return showing

    def remove(self, showing_id: int) -> Showing:
        showing = self.get(showing_id)
        if len(self.showings) <= 1:
            raise LastShowingError()
        del self.showings[showing_id]
        logger.info(f"Showing {showing_id} deleted")
        return showing

    def replace_seats(self, showing_id: int, seats: SeatMap) -> Showing:
        showing = self.get(showing_id)
        showing.seats = seats
        return showing

    def apply_config(self, config: CinemaConfig):
        for showing in self.showings.values():
            showing.seats = reconcile_seats(config, showing.seats)
        logger.info(f"Layout applied to {len(self.showings)} showings")
