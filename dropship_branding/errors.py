from __future__ import annotations


class InputValidationError(ValueError):
    """Request input is missing or malformed. Mapped to HTTP 400."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
