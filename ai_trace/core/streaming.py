"""
Streaming delta merging.

Folds the partial fragments of one streamed exchange into complete
per-choice values.

Each choice field is merged under a named policy:
- CONCAT: incremental text, appended in arrival order
- FIRST_NON_EMPTY: scalar set once; later fragments never overwrite it
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Tuple

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class StreamMergeError(ValueError):
    """Raised when a streamed exchange cannot be merged."""


class StreamDecodeError(StreamMergeError):
    """Raised when a stream payload does not match the expected schema."""


class FieldPolicy(Enum):
    """How a choice field is merged across fragments."""
    CONCAT = "concat"
    FIRST_NON_EMPTY = "first_non_empty"


def parse_stream(lines: Iterable[str]) -> List[str]:
    """Extract payloads from server-sent event lines.

    Blank lines, comments, event markers and the terminal sentinel are
    dropped. Arrival order is kept.

    Args:
        lines: Raw lines of one streamed exchange

    Returns:
        Payload strings with the data prefix removed
    """
    payloads = []
    for line in lines:
        line = line.strip()
        if not line.startswith(DATA_PREFIX) or line.endswith(DONE_SENTINEL):
            continue
        payloads.append(line[len(DATA_PREFIX):].strip())
    return payloads


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def merge_choice_deltas(
    deltas: Iterable[Tuple[int, Mapping[str, Any]]],
    policy: Mapping[str, FieldPolicy],
) -> Dict[int, Dict[str, Any]]:
    """Fold per-choice deltas into accumulated choice values.

    Args:
        deltas: (choice index, fields) pairs in arrival order
        policy: Merge policy for every field to accumulate

    Returns:
        Accumulated fields per choice index, ordered by first appearance
    """
    accumulated: Dict[int, Dict[str, Any]] = {}

    for index, fields in deltas:
        state = accumulated.get(index)
        if state is None:
            state = {
                name: ("" if rule is FieldPolicy.CONCAT else None)
                for name, rule in policy.items()
            }
            accumulated[index] = state

        for name, rule in policy.items():
            value = fields.get(name)
            if _is_empty(value):
                continue
            if rule is FieldPolicy.CONCAT:
                state[name] += value
            elif _is_empty(state[name]):
                state[name] = value

    return accumulated
