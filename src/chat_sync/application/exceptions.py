from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class ValidationError(AppError):
    """Malformed or missing input. Raised before the persistence gateway is touched."""


class GatewayError(AppError):
    """The persistence gateway reported a failure."""


class PopulationError(GatewayError):
    """The write went through but the entity could not be re-fetched or enriched.

    Callers should treat the operation as "maybe happened" and re-read.
    """


class ProtocolViolation(AppError):
    """An update event carried an unrecognised discriminant or shape."""
