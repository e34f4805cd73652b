from lettertrust.diff.engine import (
    calculate_stats,
    compute_edit_script,
    diff_texts,
    merge_entries,
    tokenize,
)
from lettertrust.models.diff import DiffEntry, DiffOperation

PAIRS = [
    ("", ""),
    ("", "A brand new letter."),
    ("An old letter.", ""),
    ("The patient is well.", "The patient is very well."),
    ("Line one.\n\nLine two.", "Line one.\nLine 2.\n\nLine three."),
    ("a b c d e", "e d c b a"),
    ("  leading and trailing  ", "leading and trailing"),
    ("same same same", "same same same"),
]


def _reconstruct(entries, keep):
    return "".join(e.text for e in entries if e.operation in keep)


def test_tokenize_preserves_whitespace_runs():
    assert tokenize("Dear  Dr.\n\nSmith") == ["Dear", "  ", "Dr.", "\n\n", "Smith"]
    assert tokenize("") == []


def test_diff_reconstructs_both_inputs():
    for original, modified in PAIRS:
        entries = diff_texts(original, modified)
        assert _reconstruct(entries, {DiffOperation.EQUAL, DiffOperation.DELETE}) == original
        assert _reconstruct(entries, {DiffOperation.EQUAL, DiffOperation.INSERT}) == modified


def test_identical_inputs_are_all_equal():
    text = "Dear Dr. Chen,\n\nThank you for the referral."
    entries = diff_texts(text, text)

    assert all(e.operation is DiffOperation.EQUAL for e in entries)
    assert "".join(e.text for e in entries) == text

    stats = calculate_stats(entries)
    assert stats.additions == 0
    assert stats.deletions == 0
    assert stats.percent_changed == 0


def test_single_insertion_is_isolated():
    entries = diff_texts("The patient is well.", "The patient is very well.")

    assert entries == [
        DiffEntry(DiffOperation.EQUAL, "The patient is"),
        DiffEntry(DiffOperation.INSERT, " very"),
        DiffEntry(DiffOperation.EQUAL, " well."),
    ]

    stats = calculate_stats(entries)
    assert stats.additions == 1
    assert stats.deletions == 0
    assert stats.percent_changed == 20


def test_empty_original_is_all_insertions():
    entries = diff_texts("", "Three new words")
    stats = calculate_stats(entries)

    assert [e.operation for e in entries] == [DiffOperation.INSERT]
    assert stats.additions == 3
    assert stats.percent_changed == 100


def test_stats_guard_empty_text():
    assert calculate_stats(diff_texts("", "")).percent_changed == 0
    assert calculate_stats([]).percent_changed == 0


def test_percent_changed_rounds_half_up():
    # 1 changed word out of 8 = 12.5%
    entries = [
        DiffEntry(DiffOperation.EQUAL, "one two three four five six seven"),
        DiffEntry(DiffOperation.INSERT, " eight"),
    ]
    assert calculate_stats(entries).percent_changed == 13


def test_merge_collapses_runs():
    merged = merge_entries([
        DiffEntry(DiffOperation.DELETE, "a"),
        DiffEntry(DiffOperation.DELETE, " "),
        DiffEntry(DiffOperation.INSERT, "b"),
    ])
    assert merged == [DiffEntry(DiffOperation.DELETE, "a "), DiffEntry(DiffOperation.INSERT, "b")]


def test_oversized_table_gives_identical_script(caplog):
    for original, modified in PAIRS + [
        ("alpha beta gamma shared ending", "delta epsilon shared ending"),
        ("a", "a a"),
        ("Dear Dr. Chen, the patient is well. Regards", "Hi Dr. Chen, the patient is very well. Thanks"),
    ]:
        old, new = tokenize(original), tokenize(modified)
        assert compute_edit_script(old, new, max_cells=4) == compute_edit_script(old, new, max_cells=10**9)

    assert "exceeds ceiling" in caplog.text


def test_long_letter_with_edits_at_both_ends_stays_local():
    body = " ".join(f"w{i}" for i in range(300))
    entries = diff_texts(body, "Dear " + body + " Regards", max_cells=1000)

    assert entries[0] == DiffEntry(DiffOperation.INSERT, "Dear ")
    assert entries[-1] == DiffEntry(DiffOperation.INSERT, " Regards")
    assert [e.operation for e in entries].count(DiffOperation.DELETE) == 0

    stats = calculate_stats(entries)
    assert stats.additions == 2
    assert stats.deletions == 0
    assert stats.percent_changed == 1


def test_replacement_lists_delete_before_insert():
    assert diff_texts("old", "new") == [
        DiffEntry(DiffOperation.DELETE, "old"),
        DiffEntry(DiffOperation.INSERT, "new"),
    ]
    assert diff_texts("take old dose", "take new dose") == [
        DiffEntry(DiffOperation.EQUAL, "take "),
        DiffEntry(DiffOperation.DELETE, "old"),
        DiffEntry(DiffOperation.INSERT, "new"),
        DiffEntry(DiffOperation.EQUAL, " dose"),
    ]


def test_ceiling_does_not_change_small_diffs():
    original, modified = "The patient is well.", "The patient is very well."
    assert diff_texts(original, modified, max_cells=10_000) == diff_texts(original, modified)
