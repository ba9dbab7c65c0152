"""Validation of candidate weather records.

Both provider output and caller-supplied ("manual") payloads pass through
`validate_weather` before anything is written to the store.
"""

from __future__ import annotations

import logging
from typing import Any

import pydantic

from weather_dashboard.errors import ValidationError
from weather_dashboard.models.weather import WeatherRecordIn

logger = logging.getLogger(__name__)


def _field_path(loc: tuple[Any, ...]) -> str:
    """Render a pydantic error location as a dotted field path."""
    if not loc:
        return "body"
    return ".".join(str(part) for part in loc)


def validate_weather(payload: Any) -> WeatherRecordIn:
    """Validate a candidate payload against the weather record schema.

    Args:
        payload: Mapping with camelCase (or snake_case) field names

    Returns:
        The typed record

    Raises:
        ValidationError: Listing every offending field path
    """
    try:
        return WeatherRecordIn.model_validate(payload)
    except pydantic.ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        fields: list[str] = []
        for error in errors:
            path = _field_path(error["loc"])
            if path not in fields:
                fields.append(path)
        logger.debug(f"Weather record rejected: {fields}")
        raise ValidationError(fields, errors=errors) from e
