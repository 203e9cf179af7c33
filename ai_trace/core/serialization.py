"""
Interchange encoding for canonical records.

Canonical records are pydantic dataclasses sharing ``RECORD_CONFIG``:
fields keep their snake_case names in Python and camelCase aliases on
the wire, the shape trace collectors expect.
"""

from functools import lru_cache
from typing import Any

from pydantic import ConfigDict, TypeAdapter
from pydantic.alias_generators import to_camel

RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    protected_namespaces=(),
)


@lru_cache(maxsize=None)
def _adapter(record_type: type) -> TypeAdapter:
    return TypeAdapter(record_type)


def to_interchange(record: Any) -> Any:
    """Encode a canonical record as a JSON-ready structure.

    Keys use camelCase aliases and absent (None) fields are omitted.

    Args:
        record: Any canonical record, for example an AITextTraceStep

    Returns:
        Plain dicts, lists and scalars ready for json.dumps
    """
    return _adapter(type(record)).dump_python(
        record,
        mode="json",
        by_alias=True,
        exclude_none=True,
    )
