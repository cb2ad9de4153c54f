"""
Normalisation of SurrealDB query results.

Depending on SDK version and transport, a statement comes back as a list of
statement envelopes (`{"status": "OK", "result": [...], "time": ...}`), a
single envelope, a bare list of rows, a single row, or nothing at all. Record
identifiers may be `RecordID` objects, `{"tb", "id"}` mappings or strings.
Everything above this module sees one shape: a list of dict rows with string ids.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from surreal_crud.errors import QueryError


def _is_envelope(value: Any) -> bool:
    return isinstance(value, Mapping) and "status" in value and (
        "result" in value or value.get("status") == "ERR"
    )


def _raise_for_status(envelope: Mapping[str, Any]) -> None:
    if envelope.get("status") == "ERR":
        detail = envelope.get("detail") or envelope.get("message") or envelope.get("result")
        raise QueryError(str(detail))


def _as_rows(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def normalize_result(raw: Any) -> List[Any]:
    """
    Return the rows produced by the first statement of a query.

    Raises
    ------
    QueryError
        If the first statement's envelope carries an `ERR` status.
    """
    if raw is None:
        return []
    if _is_envelope(raw):
        _raise_for_status(raw)
        return _as_rows(raw.get("result"))
    if isinstance(raw, list):
        if not raw:
            return []
        first = raw[0]
        if _is_envelope(first):
            _raise_for_status(first)
            return _as_rows(first.get("result"))
        if isinstance(first, list):
            return first
        return raw
    return [raw]


def format_record_id(value: Any) -> str:
    """Render any record identifier shape as `table:key`."""
    table = getattr(value, "table_name", None)
    if table is not None and hasattr(value, "id"):
        return f"{table}:{value.id}"
    if isinstance(value, Mapping) and "tb" in value and "id" in value:
        return f"{value['tb']}:{value['id']}"
    return str(value)


def format_record(row: Any) -> Any:
    """Copy a row with its `id` rendered as a string; non-mapping rows pass through."""
    if not isinstance(row, Mapping):
        return row
    record: Dict[str, Any] = dict(row)
    if "id" in record and record["id"] is not None:
        record["id"] = format_record_id(record["id"])
    return record


def to_record_id(table: str, record_id: Any) -> str:
    """Prefix a bare key with its table; ids that already name a table are kept."""
    text = format_record_id(record_id)
    return text if ":" in text else f"{table}:{text}"


def strip_table_prefix(record_id: str) -> str:
    return record_id.split(":", 1)[1] if ":" in record_id else record_id


__all__ = [
    "format_record",
    "format_record_id",
    "normalize_result",
    "strip_table_prefix",
    "to_record_id",
]
