"""
Token-level diff between an AI draft and the physician-edited final text.

Tokens are maximal runs of whitespace or of non-whitespace, so word
boundaries and paragraph breaks survive the round trip.

Cost: the LCS table is O(n*m) in time and memory over token counts.
A common token suffix is stripped first (output is unchanged by this).
When the remaining table would exceed max_cells (LETTERTRUST_DIFF_MAX_CELLS,
default 4,000,000 cells, roughly two 1,000-word letters) only every
sqrt(n)-th row is kept and blocks are recomputed during the backtrack.
The edit script is identical either way; only memory and time differ.
"""
import logging
import math
import re
from typing import List, Optional, Sequence, Tuple

from lettertrust.config import get_settings
from lettertrust.models.diff import DiffEntry, DiffOperation, DiffStats

logger = logging.getLogger("lettertrust.diff")

TOKEN_REGEX = re.compile(r"\s+|\S+")


def tokenize(text: str) -> List[str]:
    if not text:
        return []
    return TOKEN_REGEX.findall(text)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _next_row(prev: List[int], old_token: str, new: Sequence[str]) -> List[int]:
    curr = [0] * (len(new) + 1)
    for j in range(1, len(new) + 1):
        if old_token == new[j - 1]:
            curr[j] = prev[j - 1] + 1
        else:
            curr[j] = prev[j] if prev[j] >= curr[j - 1] else curr[j - 1]
    return curr


def _lcs_table(old: Sequence[str], new: Sequence[str]) -> List[List[int]]:
    dp = [[0] * (len(new) + 1)]
    for token in old:
        dp.append(_next_row(dp[-1], token, new))
    return dp


def _walk(
    old: Sequence[str],
    new: Sequence[str],
    rows: List[List[int]],
    base: int,
    i: int,
    j: int,
    entries: List[DiffEntry],
) -> Tuple[int, int]:
    """
    Backtrack from (i, j) down to row `base`. rows[k] holds dp row base + k.
    Entries are appended in reverse order.
    """
    while i > base or (base == 0 and j > 0):
        if i > 0 and j > 0 and old[i - 1] == new[j - 1]:
            entries.append(DiffEntry(DiffOperation.EQUAL, old[i - 1]))
            i -= 1
            j -= 1
        # Ties go to insert, so deletions land before insertions in forward order
        elif j > 0 and (i == 0 or rows[i - base][j - 1] >= rows[i - 1 - base][j]):
            entries.append(DiffEntry(DiffOperation.INSERT, new[j - 1]))
            j -= 1
        else:
            entries.append(DiffEntry(DiffOperation.DELETE, old[i - 1]))
            i -= 1
    return i, j


def _backtrack(old: Sequence[str], new: Sequence[str], dp: List[List[int]]) -> List[DiffEntry]:
    entries: List[DiffEntry] = []
    _walk(old, new, dp, 0, len(old), len(new), entries)
    entries.reverse()
    return entries


def _checkpointed_backtrack(old: Sequence[str], new: Sequence[str]) -> List[DiffEntry]:
    """
    Same path as _backtrack without holding the full table.

    Keeps every `step`-th dp row, then rebuilds one block of rows at a time
    while walking back through it. Memory is O(sqrt(n) * m), time about 2x.
    """
    n = len(old)
    step = max(1, math.isqrt(n))

    checkpoints = {0: [0] * (len(new) + 1)}
    row = checkpoints[0]
    for i in range(1, n + 1):
        row = _next_row(row, old[i - 1], new)
        if i % step == 0:
            checkpoints[i] = row

    entries: List[DiffEntry] = []
    i, j = n, len(new)
    while i > 0 or j > 0:
        base = ((i - 1) // step) * step if i > 0 else 0
        rows = [checkpoints[base]]
        for r in range(base + 1, i + 1):
            rows.append(_next_row(rows[-1], old[r - 1], new))
        i, j = _walk(old, new, rows, base, i, j, entries)

    entries.reverse()
    return entries


def _common_suffix_length(old: Sequence[str], new: Sequence[str]) -> int:
    limit = min(len(old), len(new))
    count = 0
    while count < limit and old[len(old) - 1 - count] == new[len(new) - 1 - count]:
        count += 1
    return count


def compute_edit_script(
    old_tokens: Sequence[str],
    new_tokens: Sequence[str],
    max_cells: Optional[int] = None,
) -> List[DiffEntry]:
    """
    Unmerged, one-entry-per-token edit script.
    """
    if max_cells is None:
        max_cells = get_settings().diff_max_cells

    suffix = _common_suffix_length(old_tokens, new_tokens)
    old_core = old_tokens[:len(old_tokens) - suffix]
    new_core = new_tokens[:len(new_tokens) - suffix]

    cells = (len(old_core) + 1) * (len(new_core) + 1)
    if cells > max_cells:
        logger.warning(
            f"Diff table of {cells} cells exceeds ceiling of {max_cells}; "
            f"using checkpointed rows for {len(old_core)}/{len(new_core)} tokens"
        )
        script = _checkpointed_backtrack(old_core, new_core)
    else:
        script = _backtrack(old_core, new_core, _lcs_table(old_core, new_core))

    script.extend(
        DiffEntry(DiffOperation.EQUAL, t) for t in old_tokens[len(old_tokens) - suffix:]
    )
    return script


def merge_entries(entries: Sequence[DiffEntry]) -> List[DiffEntry]:
    """Collapse consecutive entries that share an operation."""
    merged: List[DiffEntry] = []
    for entry in entries:
        if merged and merged[-1].operation is entry.operation:
            merged[-1] = DiffEntry(entry.operation, merged[-1].text + entry.text)
        else:
            merged.append(entry)
    return merged


def diff_texts(original: str, modified: str, max_cells: Optional[int] = None) -> List[DiffEntry]:
    """
    Main entry point. Pure and total: never raises for str input.
    """
    old_tokens = tokenize(original or "")
    new_tokens = tokenize(modified or "")
    entries = merge_entries(compute_edit_script(old_tokens, new_tokens, max_cells))

    logger.debug(
        f"Diff computed: {len(old_tokens)} -> {len(new_tokens)} tokens, {len(entries)} entries"
    )
    return entries


def _word_count(text: str) -> int:
    return len(text.split())


def calculate_stats(entries: Sequence[DiffEntry]) -> DiffStats:
    additions = 0
    deletions = 0
    total = 0

    for entry in entries:
        words = _word_count(entry.text)
        if entry.operation is DiffOperation.INSERT:
            additions += words
        elif entry.operation is DiffOperation.DELETE:
            deletions += words
        total += words

    percent_changed = _round_half_up((additions + deletions) / total * 100) if total > 0 else 0

    return DiffStats(additions=additions, deletions=deletions, percent_changed=percent_changed)
