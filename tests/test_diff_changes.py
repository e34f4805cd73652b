from lettertrust.diff.changes import render_unified, side_by_side, summarize_changes
from lettertrust.diff.engine import diff_texts
from lettertrust.models.diff import ChangeType, DiffOperation

from tests.fixtures.sample_letters import DRAFT_LETTER, FINAL_LETTER, FIXED_TIME


def test_side_by_side_panes_rebuild_each_text():
    entries = diff_texts(DRAFT_LETTER, FINAL_LETTER)
    left, right = side_by_side(entries)

    assert "".join(e.text for e in left) == DRAFT_LETTER
    assert "".join(e.text for e in right) == FINAL_LETTER
    assert all(e.operation is not DiffOperation.INSERT for e in left)
    assert all(e.operation is not DiffOperation.DELETE for e in right)


def test_render_unified_marks_changes():
    entries = diff_texts("take 2.5 mg daily", "take 5 mg daily")
    assert render_unified(entries) == "take [-2.5-]{+5+} mg daily"


def test_summarize_changes_groups_edits():
    diff = summarize_changes(DRAFT_LETTER, FINAL_LETTER, user_id="dr-lee", timestamp=FIXED_TIME)

    assert len(diff.additions) == 1
    assert diff.additions[0].new_text == " very"
    assert diff.additions[0].type is ChangeType.ADDITION

    assert len(diff.modifications) == 1
    modification = diff.modifications[0]
    assert modification.original_text == "2.5"
    assert modification.new_text == "5"
    assert DRAFT_LETTER[modification.index:modification.index + 3] == "2.5"

    assert diff.deletions == []
    assert diff.change_count == 2
    assert all(c.user_id == "dr-lee" and c.timestamp == FIXED_TIME for c in diff.additions)


def test_pure_deletion_indexes_into_draft():
    draft = "Plan: echo and stress test."
    final = "Plan: stress test."
    diff = summarize_changes(draft, final, user_id="dr-lee", timestamp=FIXED_TIME)

    assert diff.additions == []
    assert diff.modifications == []
    assert len(diff.deletions) == 1
    deletion = diff.deletions[0]
    assert deletion.original_text == " echo and"
    assert draft[deletion.index:deletion.index + len(deletion.original_text)] == deletion.original_text


def test_no_edits_yields_empty_summary():
    diff = summarize_changes("Unchanged.", "Unchanged.", user_id="dr-lee", timestamp=FIXED_TIME)
    assert diff.change_count == 0
