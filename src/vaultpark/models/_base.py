"""Base model for VaultPark records.

Every record inherits from :class:`VaultParkBaseModel` which provides:

* ``alias_generator=to_camel`` so the document store's camelCase keys
  (``driverId``, ``entryTime``) map to snake_case fields.
* A ``model_validator(mode="before")`` that drops ``None`` and empty
  strings so the field default is used.

Time fields use :data:`EpochMillis`, which normalizes whatever the store
hands back to integer milliseconds since the epoch.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

_INT_TEXT = re.compile(r"[-+]?[0-9]+")


def parse_epoch_millis(value: Any) -> int | None:
    """Convert a stored time value to epoch milliseconds.

    Integers and integer strings are already milliseconds.  Floats and
    decimal strings are epoch seconds.  Naive datetimes are taken as UTC.
    Returns ``None`` when the value is ``None``.
    """
    if value is None:
        return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return int(value.timestamp() * 1000)
    if isinstance(value, str):
        text = value.strip()
        value = int(text) if _INT_TEXT.fullmatch(text) else float(text)
    if isinstance(value, float):
        return round(value * 1000)
    return int(value)


EpochMillis = Annotated[int, BeforeValidator(parse_epoch_millis)]
"""Annotated type coercing ms, float seconds, numeric strings and datetimes to epoch ms."""

OptionalEpochMillis = Annotated[int | None, BeforeValidator(parse_epoch_millis)]


def millis_to_datetime(value: int) -> datetime:
    """Epoch milliseconds as a UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=UTC)


class VaultParkBaseModel(BaseModel):
    """Base for document-store records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return {k: v for k, v in values.items() if v is not None and not (isinstance(v, str) and not v.strip())}

    def to_document(self) -> dict[str, Any]:
        """Serialize with camelCase keys for the document store."""
        return self.model_dump(by_alias=True, mode="json")
