import logging
from typing import Any, Dict, Union

from lettertrust.audit.hash_utils import calculate_provenance_hash
from lettertrust.models.provenance import (
    IntegrityStatus,
    ProvenanceData,
    ProvenanceRecord,
    ProvenanceVerification,
)

logger = logging.getLogger("lettertrust.audit")


class ProvenanceIntegrityError(ValueError):
    """Stored hash no longer matches the stored provenance data."""

    def __init__(self, letter_id: str, verification: ProvenanceVerification):
        self.letter_id = letter_id
        self.verification = verification
        super().__init__(
            f"Provenance hash mismatch for letter {letter_id}: "
            f"stored={verification.stored_hash} computed={verification.computed_hash}"
        )


def verify_provenance(
    data: Union[ProvenanceData, Dict[str, Any]],
    stored_hash: str,
) -> ProvenanceVerification:
    computed = calculate_provenance_hash(data)

    if computed == stored_hash:
        status = IntegrityStatus.VERIFIED
    else:
        status = IntegrityStatus.TAMPERED
        logger.error(
            f"Provenance integrity failure: stored={stored_hash} computed={computed}"
        )

    return ProvenanceVerification(
        status=status,
        stored_hash=stored_hash,
        computed_hash=computed,
    )


def assert_provenance_integrity(record: ProvenanceRecord) -> ProvenanceVerification:
    """
    Raises ProvenanceIntegrityError if the record does not verify.
    """
    verification = verify_provenance(record.data, record.hash)
    if not verification.verified:
        raise ProvenanceIntegrityError(record.letter_id, verification)
    return verification
