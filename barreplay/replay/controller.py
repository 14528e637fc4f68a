# barreplay/replay/controller.py
from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from barreplay.data.models import Bar, PlaybackState, to_bars

log = logging.getLogger(__name__)

MIN_MS_PER_BAR = 10


def _norm_window(window_size: Optional[int]) -> Optional[int]:
    if window_size is None:
        return None
    window_size = int(window_size)
    return window_size if window_size > 0 else None


class ReplayController(QObject):
    """
    Rejoue une séquence de barres comme si elles arrivaient en direct.
    - ``cursor`` = nombre de barres révélées (0 = rien), jamais un index.
    - Un seul QTimer armé au plus : chaque transition passe par ``_disarm()``
      avant ``_arm()``.
    Signaux :
      cursorChanged(int)   nouveau cursor (tick, seek, step, stop)
      stateChanged(str)    "stopped" | "playing" | "paused"
      barsLoaded(int)      nombre de barres après ``load``
      finished()           fin de séquence atteinte par le timer
    """

    cursorChanged = pyqtSignal(int)
    stateChanged = pyqtSignal(str)
    barsLoaded = pyqtSignal(int)
    finished = pyqtSignal()

    def __init__(self, ms_per_bar: int = 120, window_size: Optional[int] = None, parent=None):
        super().__init__(parent)
        self._bars: List[Bar] = []
        self._cursor = 0
        self._state = PlaybackState.STOPPED
        self._ms_per_bar = max(MIN_MS_PER_BAR, int(ms_per_bar))
        self._window_size = _norm_window(window_size)
        self._timer: QTimer | None = None

    # ---------- lecture ----------
    @property
    def bars(self) -> List[Bar]:
        return list(self._bars)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def ms_per_bar(self) -> int:
        return self._ms_per_bar

    @property
    def window_size(self) -> Optional[int]:
        return self._window_size

    def is_timer_active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def visible_bars(self) -> List[Bar]:
        revealed = self._bars[:self._cursor]
        ws = self._window_size
        if ws and len(revealed) > ws:
            return revealed[-ws:]
        return revealed

    # ---------- commandes ----------
    def load(self, bars: Iterable[Any]) -> None:
        validated = to_bars(bars)
        # barsLoaded porte le reset du cursor : pas de cursorChanged(0) sur les anciennes barres
        self._disarm()
        self._set_state(PlaybackState.STOPPED)
        self._cursor = 0
        self._bars = validated
        log.info("replay loaded %d bars", len(validated))
        self.barsLoaded.emit(len(validated))

    @pyqtSlot()
    def start(self):
        self.stop()
        if not self._bars:
            log.debug("start ignored: no bars loaded")
            return
        self._set_cursor(1)
        self._set_state(PlaybackState.PLAYING)
        self._arm()

    @pyqtSlot()
    def pause(self):
        if self._state is not PlaybackState.PLAYING:
            return
        self._disarm()
        self._set_state(PlaybackState.PAUSED)

    @pyqtSlot()
    def resume(self):
        if self._state is not PlaybackState.PAUSED:
            return
        self._set_state(PlaybackState.PLAYING)
        self._arm()

    @pyqtSlot()
    def stop(self):
        self._disarm()
        self._set_state(PlaybackState.STOPPED)
        self._set_cursor(0)

    @pyqtSlot(int)
    def set_ms_per_bar(self, ms_per_bar: int):
        self._ms_per_bar = max(MIN_MS_PER_BAR, int(ms_per_bar))
        if self._state is PlaybackState.PLAYING:
            # même pile d'appel : aucun tick ne peut s'intercaler
            self._disarm()
            self._arm()
        log.debug("ms_per_bar=%d", self._ms_per_bar)

    def set_window_size(self, window_size: Optional[int]) -> None:
        self._window_size = _norm_window(window_size)

    @pyqtSlot(int)
    def seek(self, index: int):
        self._set_cursor(max(0, min(int(index), len(self._bars))))

    @pyqtSlot()
    def step_forward(self):
        self.seek(self._cursor + 1)

    @pyqtSlot()
    def step_back(self):
        self.seek(self._cursor - 1)

    @pyqtSlot()
    def tick(self):
        """Timer callback: reveal one more bar; the last one ends playback via stop()."""
        if self._state is not PlaybackState.PLAYING:
            return
        n = len(self._bars)
        nxt = self._cursor + 1
        if nxt >= n:
            self._set_cursor(n)
            self.stop()
            log.info("replay reached end (%d bars)", n)
            self.finished.emit()
            return
        self._set_cursor(nxt)

    # ---------- interne ----------
    def _arm(self):
        if self._timer is not None:
            self._disarm()
        self._timer = QTimer(self)
        self._timer.setInterval(self._ms_per_bar)
        self._timer.timeout.connect(self.tick)
        self._timer.start()

    def _disarm(self):
        if self._timer:
            self._timer.stop()
            self._timer.deleteLater()
            self._timer = None

    def _set_cursor(self, cursor: int):
        if cursor == self._cursor:
            return
        self._cursor = cursor
        self.cursorChanged.emit(cursor)

    def _set_state(self, state: PlaybackState):
        if state is self._state:
            return
        log.info("replay %s -> %s (cursor=%d)", self._state.value, state.value, self._cursor)
        self._state = state
        self.stateChanged.emit(state.value)
