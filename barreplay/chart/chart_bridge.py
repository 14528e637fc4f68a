# barreplay/chart/chart_bridge.py
from __future__ import annotations

import json
from typing import Dict, List, Sequence

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot


def _dumps(obj) -> str:
    return json.dumps(obj, separators=(",", ":"))


class ChartBridge(QObject):
    """
    Cible de rendu des studies, sans dépendance à une lib graphique.
    Tout ce qui doit être dessiné sort en JSON via des **signaux** ; une vue
    (QWebChannel, websocket, test…) s'y connecte :
      bridge.seriesLoaded.connect(fn)        # JSON list[bar] (fenêtre visible)
      bridge.lineSeriesAdded.connect(fn)     # JSON {"handle", "id", "points"}
      bridge.lineSeriesRemoved.connect(fn)   # handle
    """

    seriesLoaded = pyqtSignal(str)
    lineSeriesAdded = pyqtSignal(str)
    lineSeriesRemoved = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._series: Dict[str, str] = {}   # handle -> output id
        self._next = 0

    # ---------- barres ----------
    @pyqtSlot(list)
    def send_bars_batch(self, bars: list):
        """Emet la fenêtre visible d'un coup (seriesLoaded). Accepte Bar ou dict."""
        payload = [b.model_dump() if hasattr(b, "model_dump") else dict(b) for b in bars]
        self.seriesLoaded.emit(_dumps(payload))

    # ---------- RenderTarget ----------
    def add_line_series(self, series_id: str, points: Sequence) -> str:
        self._next += 1
        handle = f"{series_id}#{self._next}"
        self._series[handle] = series_id
        data = [{"time": p.time, "value": p.value} for p in points]
        self.lineSeriesAdded.emit(_dumps({"handle": handle, "id": series_id, "points": data}))
        return handle

    def remove_series(self, handle: str) -> None:
        if self._series.pop(handle, None) is None:
            return
        self.lineSeriesRemoved.emit(handle)

    def active_series(self) -> List[str]:
        return list(self._series)
