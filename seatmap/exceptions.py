"""Ошибки предметной области карты зала."""


class DomainError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(DomainError):
    def __init__(self, message: str):
        super().__init__(message, 404)


class SeatNotFoundError(NotFoundError):
    def __init__(self, seat_id: str):
        self.seat_id = seat_id
        super().__init__(f"Seat {seat_id} not found")


class ShowingNotFoundError(NotFoundError):
    def __init__(self, showing_id: int):
        self.showing_id = showing_id
        super().__init__(f"Showing {showing_id} not found")


class MalformedImportError(DomainError):
    """Текст не является корректной выгрузкой карты зала."""


class InvalidConfigEditError(DomainError):
    """Правка конфигурации отклонена, состояние не изменилось."""


class LastShowingError(InvalidConfigEditError):
    def __init__(self):
        super().__init__("At least one showing must remain")
