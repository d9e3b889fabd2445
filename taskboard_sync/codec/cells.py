"""
Cell-level conversions between Python values and spreadsheet cells.

Spreadsheet exports are loose: numbers come back as floats or strings,
checkboxes as ``"TRUE"``/``"FALSE"``, dates as ISO timestamps. Every reader
here tolerates that and never raises on bad input; a malformed cell reads as
absent (or the field's default).
"""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any, List, Mapping, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import to_jsonable_python

logger = logging.getLogger(__name__)

Table = List[List[Any]]

E = TypeVar("E", bound=Enum)

_TRUE_STRINGS = frozenset({"true", "yes", "1"})
_ISO_TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T")


class DecodeError(ValueError):
    """A single cell could not be decoded."""


def text(value: Any) -> str:
    """Read a cell as text. Integral numbers lose their trailing ``.0``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def optional_text(value: Any) -> Optional[str]:
    """Read a cell as text, mapping the empty cell to None."""
    result = text(value)
    return result or None


def date_text(value: Any) -> str:
    """Read a calendar date cell.

    Sheets converts date-looking cells into date values, which come back as
    ISO timestamps; only the date part is kept.
    """
    result = text(value)
    if _ISO_TIMESTAMP.match(result):
        return result[:10]
    return result


def boolean(value: Any) -> bool:
    """Read a checkbox cell: native booleans or checkbox export strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    if isinstance(value, (int, float)):
        return value == 1
    return False


def optional_integer(value: Any) -> Optional[int]:
    """Read an epoch-millisecond style cell, None when empty or malformed."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        number = float(raw)
    except ValueError:
        logger.debug("Ignoring malformed integer cell: %r", value)
        return None
    return int(number) if number.is_integer() else None


def integer(value: Any, default: int = 0) -> int:
    """Read a required integer cell, falling back to ``default``."""
    result = optional_integer(value)
    return default if result is None else result


def enum_value(
    enum_cls: Type[E],
    value: Any,
    default: Optional[E],
    aliases: Optional[Mapping[str, E]] = None,
) -> Optional[E]:
    """Read an enum cell, falling back to ``default`` for unknown values.

    ``aliases`` maps alternative spellings to members.
    """
    raw = text(value)
    if aliases and raw in aliases:
        return aliases[raw]
    try:
        return enum_cls(raw)
    except ValueError:
        logger.debug("Unknown %s value %r, using %s", enum_cls.__name__, value, default)
        return default


def parse_json(value: Any) -> Any:
    """Parse a JSON cell.

    Raises:
        DecodeError: if the cell is empty or not valid JSON
    """
    if isinstance(value, (list, dict)):
        return value
    raw = text(value).strip()
    if not raw:
        raise DecodeError("empty cell")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise DecodeError(f"invalid JSON: {e}") from e


def composite(value: Any, adapter: TypeAdapter) -> Any:
    """Decode a JSON cell and validate its shape.

    Returns None (absent) when the cell is empty, unparsable or the wrong
    shape. Never raises.
    """
    try:
        return adapter.validate_python(parse_json(value))
    except (DecodeError, ValidationError) as e:
        if text(value).strip():
            logger.warning("Treating malformed composite cell as absent: %s", e)
        return None


def encode_composite(value: Any) -> str:
    """Encode a list or nested structure into a single JSON cell."""
    if value is None:
        return ""
    return json.dumps(to_jsonable_python(value), separators=(",", ":"))


def encode_optional(value: Any) -> Any:
    """Encode an optional scalar: the value itself, or an empty cell."""
    return "" if value is None else value
