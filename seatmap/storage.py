import copy
import json
import os
from typing import Optional

from pydantic import ValidationError

from seatmap.cinema import mismatched_seat_keys
from seatmap.editor import ConfigEditor
from seatmap.logger import logger
from seatmap.models import CINEMA_CONFIG, CinemaConfig, Showing
from seatmap.schemas import (
    CinemaConfigSchema,
    CinemaStateSchema,
    ShowingStateSchema,
    seats_from_schema,
    seats_to_schema,
)
from seatmap.showings import ShowingBook


class BlobStore:
    """Хранилище одного текстового снимка состояния"""

    def load(self) -> Optional[str]:
        raise NotImplementedError

    def save(self, blob: str) -> bool:
        raise NotImplementedError


class MemoryBlobStore(BlobStore):
    def __init__(self, blob: Optional[str] = None):
        self.blob = blob

    def load(self) -> Optional[str]:
        return self.blob

    def save(self, blob: str) -> bool:
        self.blob = blob
        return True


class FileBlobStore(BlobStore):
    """Файловое хранилище"""

    def __init__(self, path: str):
        self.path = path

    def ensure_data_dir(self):
        """Создать директорию для данных если не существует"""
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    def load(self) -> Optional[str]:
        if not os.path.exists(self.path):
            logger.info(f"State file {self.path} not found, using default data")
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            logger.error(f"Error reading {self.path}: {e}")
            return None

    def save(self, blob: str) -> bool:
        try:
            self.ensure_data_dir()
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(blob)
        except OSError as e:
            logger.error(f"Error saving {self.path}: {e}")
            return False
        logger.info(f"State saved to {self.path}")
        return True


class CinemaState:
    """Активная схема зала и сеансы"""

    def __init__(self, config: Optional[CinemaConfig] = None, book: Optional[ShowingBook] = None):
        self.config = config or copy.deepcopy(CINEMA_CONFIG)
        self.book = book if book is not None else ShowingBook.default(self.config)
        self.editor = ConfigEditor(self.config)

    def apply_config(self, config: CinemaConfig):
        self.config = config
        self.book.apply_config(config)
        # черновик начинается с новой активной схемы, сохраненные остаются
        self.editor.draft = copy.deepcopy(config)


def dump_state(state: CinemaState) -> str:
    data = CinemaStateSchema(
        config=CinemaConfigSchema.from_model(state.config),
        showings=[
            ShowingStateSchema(
                id=s.id,
                title=s.title,
                schedule=s.schedule,
                price=s.price,
                seats=seats_to_schema(s.seats)
            )
            for s in state.book.all()
        ]
    )
    return json.dumps(data.model_dump(by_alias=True, exclude_none=True), ensure_ascii=False, indent=2)


def restore_state(blob: Optional[str]) -> CinemaState:
    """Восстановить состояние из снимка; при ошибке - состояние по умолчанию"""
    if not blob:
        return CinemaState()

    try:
        data = CinemaStateSchema.model_validate_json(blob)
    except ValidationError as e:
        logger.error(f"Error loading state: {e.error_count()} validation error(s), using default data")
        return CinemaState()

    config = data.config.to_model()
    if not data.showings:
        logger.warning("State has no showings, creating the default one")
        return CinemaState(config=config)

    showings = []
    seen = set()
    for s in data.showings:
        if s.id in seen:
            logger.warning(f"Duplicate showing {s.id} in state, keeping the first one")
            continue
        seen.add(s.id)

        seats = seats_from_schema(s.seats)
        mismatched = mismatched_seat_keys(seats)
        if mismatched:
            logger.error(f"Showing {s.id} has seat ids that do not match their keys: "
                         f"{', '.join(mismatched)}, using default data")
            return CinemaState()

        showings.append(Showing(
            id=s.id,
            title=s.title,
            schedule=s.schedule,
            price=s.price,
            seats=seats
        ))

    book = ShowingBook(showings)
    logger.info(f"Loaded {len(book)} showings")
    return CinemaState(config=config, book=book)


def persist(state: CinemaState, store: BlobStore) -> Optional[str]:
    """Сохранить снимок; ошибка хранилища не откатывает состояние"""
    blob = dump_state(state)
    if not store.save(blob):
        logger.warning("State was not persisted, keeping in-memory changes")
    return blob
