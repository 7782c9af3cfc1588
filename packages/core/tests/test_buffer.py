"""Tests for ActionBuffer."""

from prcrew_core.actions.buffer import ActionBuffer
from prcrew_core.models import ApprovalState, BufferState, LineComment


def test_new_buffer_is_empty():
    buffer = ActionBuffer()
    assert buffer.is_empty
    assert buffer.get_state() == BufferState()
    assert buffer.approval_state is ApprovalState.NONE


def test_state_counts_every_category():
    buffer = ActionBuffer()
    buffer.add_line_comment("a.py", 3, "fix")
    buffer.add_line_comment("b.py", 7, "also fix", suggestion="x = 1")
    buffer.add_review_comment("overall")
    buffer.add_summary("does things")
    buffer.set_general_comment("thanks")
    buffer.mark_for_approval()

    state = buffer.get_state()
    assert state.line_comment_count == 2
    assert state.review_comment_count == 1
    assert state.summary_count == 1
    assert state.has_general_comment is True
    assert state.approval_state is ApprovalState.APPROVED
    assert state.total_actions == 6


def test_line_comments_keep_insertion_order():
    buffer = ActionBuffer()
    buffer.add_line_comment("b.py", 9, "second file first")
    buffer.add_line_comment("a.py", 1, "then this")
    assert buffer.line_comments == (
        LineComment("b.py", 9, "second file first"),
        LineComment("a.py", 1, "then this"),
    )


def test_general_comment_is_replaced():
    buffer = ActionBuffer()
    buffer.set_general_comment("one")
    buffer.set_general_comment("two")
    assert buffer.general_comment == "two"
    assert buffer.get_state().total_actions == 1


def test_last_approval_call_wins():
    buffer = ActionBuffer()
    buffer.mark_for_approval("ship it")
    buffer.mark_for_changes_requested("wait")
    assert buffer.approval_state is ApprovalState.CHANGES_REQUESTED
    assert buffer.approval_comment == "wait"

    buffer.mark_for_approval()
    assert buffer.approval_state is ApprovalState.APPROVED
    assert buffer.approval_comment is None


def test_clear_resets_everything():
    buffer = ActionBuffer()
    buffer.add_line_comment("a.py", 1, "x")
    buffer.add_review_comment("y")
    buffer.add_summary("z")
    buffer.set_general_comment("g")
    buffer.mark_for_changes_requested("c")

    buffer.clear()

    assert buffer.is_empty
    assert buffer.general_comment is None
    assert buffer.approval_comment is None
    assert buffer.approval_state is ApprovalState.NONE


def test_read_access_does_not_expose_internal_lists():
    buffer = ActionBuffer()
    buffer.add_summary("s")
    summaries = buffer.summaries
    assert isinstance(summaries, tuple)
    buffer.add_summary("t")
    assert summaries == ("s",)


def test_buffer_state_serializes_enum_as_value():
    buffer = ActionBuffer()
    buffer.mark_for_changes_requested()
    assert buffer.get_state().to_dict()["approval_state"] == "ChangesRequested"
