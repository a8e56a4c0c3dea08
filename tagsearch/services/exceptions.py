"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class CreatorSearchFailure(ServiceError):
    """User-facing creator search failure carrying a title and message."""

    def __init__(self, title: str, message: str) -> None:
        super().__init__(f"{title}: {message}")
        self.title = title
        self.message = message


class BackendError(ServiceError):
    """Raised when a search backend call fails or returns malformed data."""


class TagUniverseLoadFailure(ServiceError):
    pass


class HistoryError(ServiceError):
    pass


class HistoryReadFailure(HistoryError):
    pass


class HistoryWriteFailure(HistoryError):
    pass


__all__ = [
    "BackendError",
    "CreatorSearchFailure",
    "HistoryError",
    "HistoryReadFailure",
    "HistoryWriteFailure",
    "ServiceError",
    "TagUniverseLoadFailure",
]
