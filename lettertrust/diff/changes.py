"""
Render data and edit summaries derived from the token diff.
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from lettertrust.diff.engine import diff_texts
from lettertrust.models.diff import (
    ChangeType,
    ContentDiff,
    DiffEntry,
    DiffOperation,
    TextChange,
)


def side_by_side(entries: Sequence[DiffEntry]) -> Tuple[List[DiffEntry], List[DiffEntry]]:
    """
    Split a diff into the draft pane (equal + delete) and the final pane (equal + insert).
    """
    left = [e for e in entries if e.operation is not DiffOperation.INSERT]
    right = [e for e in entries if e.operation is not DiffOperation.DELETE]
    return left, right


def render_unified(entries: Sequence[DiffEntry]) -> str:
    parts = []
    for entry in entries:
        if entry.operation is DiffOperation.DELETE:
            parts.append(f"[-{entry.text}-]")
        elif entry.operation is DiffOperation.INSERT:
            parts.append(f"{{+{entry.text}+}}")
        else:
            parts.append(entry.text)
    return "".join(parts)


def summarize_changes(
    draft: str,
    final: str,
    user_id: str,
    timestamp: Optional[datetime] = None,
    max_cells: Optional[int] = None,
) -> ContentDiff:
    """
    Group the physician's edits into additions, deletions and modifications.

    A delete directly followed by an insert (or the reverse) is one
    modification. Indexes are character offsets into the draft.
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    entries = diff_texts(draft, final, max_cells=max_cells)

    additions: List[TextChange] = []
    deletions: List[TextChange] = []
    modifications: List[TextChange] = []

    offset = 0
    i = 0
    while i < len(entries):
        entry = entries[i]
        nxt = entries[i + 1] if i + 1 < len(entries) else None

        if entry.operation is DiffOperation.EQUAL:
            offset += len(entry.text)
            i += 1
            continue

        if nxt is not None and nxt.operation not in (DiffOperation.EQUAL, entry.operation):
            deleted = entry if entry.operation is DiffOperation.DELETE else nxt
            inserted = nxt if deleted is entry else entry
            modifications.append(TextChange(
                type=ChangeType.MODIFICATION,
                index=offset,
                timestamp=timestamp,
                user_id=user_id,
                original_text=deleted.text,
                new_text=inserted.text,
            ))
            offset += len(deleted.text)
            i += 2
            continue

        if entry.operation is DiffOperation.DELETE:
            deletions.append(TextChange(
                type=ChangeType.DELETION,
                index=offset,
                timestamp=timestamp,
                user_id=user_id,
                original_text=entry.text,
            ))
            offset += len(entry.text)
        else:
            additions.append(TextChange(
                type=ChangeType.ADDITION,
                index=offset,
                timestamp=timestamp,
                user_id=user_id,
                new_text=entry.text,
            ))
        i += 1

    return ContentDiff(additions=additions, deletions=deletions, modifications=modifications)
