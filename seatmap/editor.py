import copy
from typing import List, Optional

from seatmap.exceptions import InvalidConfigEditError
from seatmap.logger import logger
from seatmap.models import CINEMA_CONFIG, CinemaConfig, CinemaSection


def validate_config(config: CinemaConfig):
    """Схема должна иметь хотя бы одну секцию и уникальные префиксы"""
    if not config.sections:
        raise InvalidConfigEditError("There must be at least one section")
    prefixes = [s.prefix for s in config.sections] + [config.back_row.prefix]
    if len(set(prefixes)) != len(prefixes):
        raise InvalidConfigEditError("Section prefixes must be unique")


class ConfigEditor:
    """
    Черновик конфигурации зала.

    Правки меняют только черновик; активная схема меняется лишь через apply().
    """

    def __init__(self, active: CinemaConfig = CINEMA_CONFIG):
        self.draft = copy.deepcopy(active)
        self.saved: List[CinemaConfig] = []

    def _section(self, index: int) -> CinemaSection:
        if not 0 <= index < len(self.draft.sections):
            raise InvalidConfigEditError(f"Section {index} does not exist")
        return self.draft.sections[index]

    def change_section(self, index: int, name: Optional[str] = None, rows: Optional[int] = None,
                       seats_per_row: Optional[int] = None) -> CinemaConfig:
        section = self._section(index)
        if name is not None:
            section.name = name
        if rows is not None:
            section.rows = rows
        if seats_per_row is not None:
            section.seats_per_row = seats_per_row
        return self.draft

    def _free_prefix(self) -> str:
        used = {s.prefix for s in self.draft.sections} | {self.draft.back_row.prefix}
        n = len(self.draft.sections) + 1
        while f"S{n}" in used:
            n += 1
        return f"S{n}"

    def add_section(self, name: Optional[str] = None, rows: int = 7, seats_per_row: int = 4,
                    prefix: Optional[str] = None) -> CinemaConfig:
        if prefix is None:
            prefix = self._free_prefix()
        elif prefix == self.draft.back_row.prefix or any(s.prefix == prefix for s in self.draft.sections):
            raise InvalidConfigEditError(f"Prefix {prefix} is already used")

        name = name or f"Nueva Sección {len(self.draft.sections) + 1}"
        self.draft.sections.append(CinemaSection(name=name, rows=rows, seats_per_row=seats_per_row, prefix=prefix))
        return self.draft

    def remove_section(self, index: int) -> CinemaConfig:
        self._section(index)
        if len(self.draft.sections) <= 1:
            raise InvalidConfigEditError("There must be at least one section")
        del self.draft.sections[index]
        return self.draft

    def set_back_row(self, seats: Optional[int] = None, name: Optional[str] = None) -> CinemaConfig:
        if seats is not None:
            self.draft.back_row.seats = seats
        if name is not None:
            self.draft.back_row.name = name
        return self.draft

    def rename(self, name: str) -> CinemaConfig:
        self.draft.name = name
        return self.draft

    def set_price(self, price: float) -> CinemaConfig:
        self.draft.price_per_seat = price
        return self.draft

    def save(self) -> int:
        self.saved.append(copy.deepcopy(self.draft))
        logger.info(f"Config '{self.draft.name}' saved ({self.draft.total_seats} seats)")
        return len(self.saved) - 1

    def load(self, index: int) -> CinemaConfig:
        if not 0 <= index < len(self.saved):
            raise InvalidConfigEditError(f"Saved config {index} does not exist")
        self.draft = copy.deepcopy(self.saved[index])
        return self.draft

    def reset(self) -> CinemaConfig:
        self.draft = copy.deepcopy(CINEMA_CONFIG)
        return self.draft

    def apply(self) -> CinemaConfig:
        """Независимая копия черновика для установки в качестве активной схемы"""
        validate_config(self.draft)
        logger.info(f"Config '{self.draft.name}' applied ({self.draft.total_seats} seats)")
        return copy.deepcopy(self.draft)
