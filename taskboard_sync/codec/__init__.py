"""
Entity codec - typed collections to flat sheet tables and back.

The wire payload is a JSON object keyed by sheet tab name; every value is a
table whose first row is the header.
"""

from typing import Any, Dict, Mapping

from ..models import Snapshot
from .base import EntityCodec
from .cells import DecodeError, Table
from .entities import (
    AccountCodec,
    ActionItemCodec,
    BugReportCodec,
    CompletionCodec,
    FeatureRequestCodec,
    NoteCodec,
    PersonCodec,
    WorkItemCodec,
)

CODECS: Dict[str, EntityCodec] = {
    codec.collection: codec
    for codec in (
        PersonCodec(),
        AccountCodec(),
        WorkItemCodec(),
        CompletionCodec(),
        ActionItemCodec(),
        BugReportCodec(),
        FeatureRequestCodec(),
        NoteCodec(),
    )
}

TABLE_NAMES: Dict[str, str] = {name: codec.table_name for name, codec in CODECS.items()}


def get_codec(collection: str) -> EntityCodec:
    """Look up the codec for a snapshot collection name."""
    try:
        return CODECS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def encode_snapshot(snapshot: Snapshot) -> Dict[str, Table]:
    """Build the push payload: one table per sheet tab."""
    return {
        codec.table_name: codec.encode(getattr(snapshot, name))
        for name, codec in CODECS.items()
    }


def decode_payload(payload: Mapping[str, Any]) -> Snapshot:
    """Decode a pull response. Missing tabs become empty collections."""
    return Snapshot(
        **{name: codec.decode(payload.get(codec.table_name)) for name, codec in CODECS.items()}
    )


__all__ = [
    "CODECS",
    "TABLE_NAMES",
    "DecodeError",
    "EntityCodec",
    "Table",
    "decode_payload",
    "encode_snapshot",
    "get_codec",
    "AccountCodec",
    "ActionItemCodec",
    "BugReportCodec",
    "CompletionCodec",
    "FeatureRequestCodec",
    "NoteCodec",
    "PersonCodec",
    "WorkItemCodec",
]
