import json
import hashlib
from typing import Any, Dict, Union

from lettertrust.models.provenance import ProvenanceData


def _as_payload(data: Union[ProvenanceData, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(data, ProvenanceData):
        return data.to_dict()
    return data


def canonical_serialize(data: Union[ProvenanceData, Dict[str, Any]]) -> str:
    """
    JSON with keys sorted at every nesting level and no insignificant
    whitespace. The hash is only reproducible if this stays byte-stable.
    """
    return json.dumps(
        _as_payload(data),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def calculate_provenance_hash(data: Union[ProvenanceData, Dict[str, Any]]) -> str:
    """
    Deterministically compute a SHA-256 hash over the canonical serialization.
    """
    serialized = canonical_serialize(data)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
