import hashlib
import jsonpickle
import mmh3
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from zerg.types.models import Condition, ConditionStatus

RESOURCE_HASH_ANNOTATION = "zerg.io/resource-hash"


def now() -> str:
    return datetime.now(timezone.utc).isoformat()


def sort_dict_keys(d):
    """Recursively sort dictionary keys and handle nested structures.

    Args:
        d: Data structure (dict, list, or primitive type)

    Returns:
        Sorted version of the data structure
    """
    if isinstance(d, dict):
        return {
            key: sort_dict_keys(value)
            for key, value in sorted(d.items())
        }
    elif isinstance(d, list):
        return [sort_dict_keys(item) for item in d]
    else:
        return d


def canonicalize_dict(data):
    """
    Returns a canonical JSON representation of a dictionary.

    The JSON string uses sorted keys, which ensures that the representation
    of the dictionary remains consistent even when key order varies.
    """
    return jsonpickle.dumps(sort_dict_keys(data), unpicklable=False)


def upsert_condition(
    conds: Optional[List[Condition]],
    type: str,
    status: ConditionStatus,
    reason: str = None,
    message: str = None,
) -> List[Condition]:
    """In-memory merge by .type. Only bump lastTransitionTime when status flips."""
    conds = list(conds or [])
    for i, c in enumerate(conds):
        if c.type == type:
            ltt = c.last_transition_time or now()
            if c.status != status:
                ltt = now()
            conds[i] = Condition(
                type=type,
                status=status,
                last_transition_time=ltt,
                reason=reason,
                message=message,
            )
            break
    else:
        conds.append(
            Condition(
                type=type,
                status=status,
                last_transition_time=now(),
                reason=reason,
                message=message,
            )
        )
    return conds


def remove_conditions(conds: Optional[List[Condition]], types: List[str]) -> List[Condition]:
    """Drop conditions of the given types."""
    return [c for c in (conds or []) if c.type not in types]


def compute_hash(data: Any) -> str:
    """Compute a murmur3 hash."""
    if isinstance(data, dict):
        _data = canonicalize_dict(data)
    elif isinstance(data, str):
        _data = data.encode()
    else:
        raise ValueError(f"Hash of {type(data)} is not supported.")
    murmur_str = str(mmh3.hash128(_data))
    full_hash = hashlib.sha256(murmur_str.encode("utf-8")).hexdigest()
    # First 16 characters keep annotations readable
    return full_hash[:16]


def prepare_hash_annotation(hash: str) -> Dict[str, str]:
    return {RESOURCE_HASH_ANNOTATION: str(hash)}
