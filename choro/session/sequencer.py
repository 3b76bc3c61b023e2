"""
Year-by-year playback on the Qt event loop.

Replays an ordered list of keys (usually years) at a fixed cadence,
calling ``on_step(key)`` once per tick.  The final key is always emitted,
then the sequence stops by itself.

At most one sequence is active.  ``start()`` takes the single active slot
and cancels whatever held it before, so two sequences never interleave on
the same selection state.  A superseded or cancelled ``SequenceHandle``
never calls back again, even if a stale timer event is still queued.

Usage
-----
    seq = AnimationSequencer()
    seq.finished.connect(on_done)
    seq.start([2015, 2016, 2017], 100, lambda year: session.select(year=year))
    seq.restart()     # back to 2015
    seq.shutdown()    # on window close
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence

from PyQt5 import QtCore

log = logging.getLogger(__name__)


@dataclass
class SequenceHandle:
    """Ownership token for one playback run."""
    keys: List[Any]
    interval_ms: int
    on_step: Callable[[Any], None]
    cursor: int = 0
    cancelled: bool = False
    emitted: List[Any] = field(default_factory=list)

    @property
    def done(self) -> bool:
        return self.cursor >= len(self.keys)

    def cancel(self) -> None:
        self.cancelled = True


class AnimationSequencer(QtCore.QObject):
    """Single-slot cooperative timer for stepping through keys.

    Signals
    -------
    stepped(object)
        Emitted after ``on_step`` with the key just played.
    finished()
        Emitted once the final key has been played.
    """

    stepped = QtCore.pyqtSignal(object)
    finished = QtCore.pyqtSignal()

    def __init__(self, parent: Optional[QtCore.QObject] = None):
        super().__init__(parent)
        self._timer = QtCore.QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._active: Optional[SequenceHandle] = None
        self._last: Optional[SequenceHandle] = None

    @property
    def is_active(self) -> bool:
        return self._active is not None and self._timer.isActive()

    @property
    def active_handle(self) -> Optional[SequenceHandle]:
        return self._active

    def start(
        self,
        keys: Sequence[Any],
        step_interval_ms: int,
        on_step: Callable[[Any], None],
    ) -> Optional[SequenceHandle]:
        """Begin a new sequence, cancelling any sequence already running."""
        self.cancel()
        keys = list(keys)
        if not keys:
            log.info("Sequencer: nothing to play")
            return None
        handle = SequenceHandle(keys, int(step_interval_ms), on_step)
        self._active = handle
        self._timer.start(handle.interval_ms)
        log.info("Sequencer started — %d steps every %d ms", len(keys), handle.interval_ms)
        return handle

    def restart(self) -> Optional[SequenceHandle]:
        """Replay the current (or last) key list from its first key."""
        handle = self._active or self._last
        if handle is None:
            return None
        return self.start(handle.keys, handle.interval_ms, handle.on_step)

    def cancel(self) -> None:
        self._timer.stop()
        if self._active is not None:
            self._active.cancel()
            self._last = self._active
            log.debug("Sequencer cancelled at step %d/%d",
                      self._active.cursor, len(self._active.keys))
        self._active = None

    def shutdown(self) -> None:
        """Tear-down path: stop for good and drop the callback."""
        self.cancel()
        self._last = None

    def _tick(self) -> None:
        handle = self._active
        if handle is None or handle.cancelled:
            self._timer.stop()
            return

        key = handle.keys[handle.cursor]
        handle.cursor += 1
        handle.emitted.append(key)
        if handle.done:
            # stop before the callback; it may start a new sequence
            self._timer.stop()
            self._active = None
            self._last = handle

        handle.on_step(key)
        self.stepped.emit(key)

        # a callback that started a new sequence owns the slot now
        if handle.done and self._active is None:
            log.info("Sequencer finished — %d steps", len(handle.keys))
            self.finished.emit()
