"""Mouse-driven selection state."""

from enum import Enum
from typing import Optional


class SelectionState(Enum):
    """Lifecycle of a mouse selection."""
    NONE = "none"
    DRAGGING = "dragging"  # Left button held
    FIXED = "fixed"  # Released with a non-empty range


class Selection:
    """Anchor offset plus drag state.

    Only the anchor is stored. The selected range is always derived from the
    anchor and the live cursor offset, so any cursor movement automatically
    extends or shrinks it.
    """

    def __init__(self):
        self.state = SelectionState.NONE
        self.anchor: Optional[int] = None
        self.active = False  # True once the cursor has left the anchor

    @property
    def dragging(self) -> bool:
        return self.state == SelectionState.DRAGGING

    @property
    def has_selection(self) -> bool:
        """True when there is a non-empty range to act on."""
        return self.anchor is not None and self.active and self.state != SelectionState.NONE

    def begin(self, anchor: int) -> None:
        """Start a drag at ``anchor``; nothing is selected yet."""
        self.state = SelectionState.DRAGGING
        self.anchor = anchor
        self.active = False

    def extend(self, cursor_offset: int) -> None:
        """Note that the cursor moved to ``cursor_offset`` during a drag."""
        if self.anchor is not None and cursor_offset != self.anchor:
            self.active = True

    def release(self) -> bool:
        """Finish a drag. Returns True if a range remains selected."""
        if self.state != SelectionState.DRAGGING:
            return False
        if self.active:
            self.state = SelectionState.FIXED
            return True
        self.clear()
        return False

    def clear(self) -> None:
        self.state = SelectionState.NONE
        self.anchor = None
        self.active = False

    def range(self, cursor_offset: int) -> Optional[tuple[int, int]]:
        """Return the normalized [start, end) range, or None."""
        if not self.has_selection:
            return None
        assert self.anchor is not None
        return (min(self.anchor, cursor_offset), max(self.anchor, cursor_offset))
