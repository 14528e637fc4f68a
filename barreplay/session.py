# barreplay/session.py
from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from barreplay.chart.chart_bridge import ChartBridge
from barreplay.commands import (
    Command, CommandContext, CommandRegistry, ContextMenuModel, build_context_menu_model,
)
from barreplay.data.models import PlaybackState
from barreplay.errors import UnknownStudyError
from barreplay.replay.controller import ReplayController
from barreplay.studies.builtin import default_registry
from barreplay.studies.registry import StudyRegistry
from barreplay.studies.types import StudyInstance, StudyOutput

log = logging.getLogger(__name__)


@dataclass
class _ActiveStudy:
    study_id: str
    params: Dict[str, Any] = field(default_factory=dict)
    instance: Optional[StudyInstance] = None


class ReplaySession(QObject):
    """Relie ReplayController, StudyRegistry et ChartBridge.

    À chaque changement de fenêtre visible (tick, seek, step, stop, load) :
    barres -> bridge, puis chaque study est détachée et ré-attachée sur la
    nouvelle fenêtre. ``frameChanged(cursor)`` est émis une fois tout à jour.
    """

    frameChanged = pyqtSignal(int)

    def __init__(self, controller: ReplayController | None = None,
                 registry: StudyRegistry | None = None,
                 bridge: ChartBridge | None = None, parent=None):
        super().__init__(parent)
        self.controller = controller or ReplayController(parent=self)
        self.registry = registry or default_registry()
        self.bridge = bridge or ChartBridge(self)
        self.commands = CommandRegistry()
        self._studies: Dict[str, _ActiveStudy] = {}
        self._closed = False

        self.controller.cursorChanged.connect(self._on_frame)
        self.controller.barsLoaded.connect(self._on_frame)
        self._register_replay_commands()

    # ---------- données ----------
    def load(self, bars: Iterable[Any]) -> None:
        self.controller.load(bars)

    # ---------- studies ----------
    def add_study(self, study_id: str, params: Optional[Mapping[str, Any]] = None,
                  key: Optional[str] = None) -> str:
        if study_id not in self.registry:
            raise UnknownStudyError(study_id)
        key = key or study_id
        self.remove_study(key)
        entry = _ActiveStudy(study_id=study_id, params=dict(params or {}))
        self._studies[key] = entry
        self._attach(entry)
        return key

    def remove_study(self, key: str) -> bool:
        entry = self._studies.pop(key, None)
        if entry is None:
            return False
        self._detach(entry)
        return True

    def set_study_params(self, key: str, params: Mapping[str, Any]) -> None:
        entry = self._studies[key]
        entry.params = dict(params)
        self._detach(entry)
        self._attach(entry)

    def active_studies(self) -> List[str]:
        return list(self._studies)

    def study_outputs(self, key: str) -> List[StudyOutput]:
        entry = self._studies.get(key)
        if entry is None or entry.instance is None:
            return []
        return list(getattr(entry.instance, "outputs", []))

    # ---------- menu ----------
    def context_menu(self, ctx: CommandContext, x: float = 0, y: float = 0) -> ContextMenuModel:
        return build_context_menu_model(self.commands, ctx, x, y)

    # ---------- shutdown ----------
    @pyqtSlot()
    def close(self):
        if self._closed:
            return
        self._closed = True
        self.controller.stop()
        for entry in self._studies.values():
            self._detach(entry)
        self._studies.clear()

    # ---------- interne ----------
    def _attach(self, entry: _ActiveStudy) -> None:
        entry.instance = self.registry.attach(
            self.bridge, self.controller.visible_bars(), entry.study_id, entry.params
        )

    def _detach(self, entry: _ActiveStudy) -> None:
        if entry.instance is not None:
            entry.instance.remove()
            entry.instance = None

    def _on_frame(self, *_):
        if self._closed:
            return
        visible = self.controller.visible_bars()
        self.bridge.send_bars_batch(visible)
        for entry in self._studies.values():
            self._detach(entry)
            self._attach(entry)
        log.debug("frame cursor=%d visible=%d studies=%d",
                  self.controller.cursor, len(visible), len(self._studies))
        self.frameChanged.emit(self.controller.cursor)

    def _seek_target(self, ctx: CommandContext) -> Optional[int]:
        bars = self.controller.bars
        if not bars:
            return None
        if ctx.time is not None:
            return bisect_right([b.time for b in bars], int(ctx.time))
        if ctx.logical_index is not None:
            # index dans la fenêtre visible -> nombre de barres révélées
            first = self.controller.cursor - len(self.controller.visible_bars())
            return first + int(ctx.logical_index) + 1
        return None

    def _register_replay_commands(self) -> None:
        c = self.controller

        def state_is(*states: PlaybackState):
            return lambda _ctx: c.state in states

        def seek_here(ctx: CommandContext) -> None:
            target = self._seek_target(ctx)
            if target is None:
                log.debug("seek_here ignored: no time/index in context")
                return
            c.seek(target)

        for cmd in (
            Command("replay.start", "Démarrer le replay", lambda _ctx: c.start(),
                    when=lambda _ctx: bool(c.bars)),
            Command("replay.pause", "Pause", lambda _ctx: c.pause(),
                    when=state_is(PlaybackState.PLAYING), shortcut="Space"),
            Command("replay.resume", "Reprendre", lambda _ctx: c.resume(),
                    when=state_is(PlaybackState.PAUSED), shortcut="Space"),
            Command("replay.stop", "Stop", lambda _ctx: c.stop(),
                    when=state_is(PlaybackState.PLAYING, PlaybackState.PAUSED)),
            Command("replay.step_back", "Barre précédente", lambda _ctx: c.step_back(),
                    when=lambda _ctx: c.cursor > 0, shortcut="Left"),
            Command("replay.step_forward", "Barre suivante", lambda _ctx: c.step_forward(),
                    when=lambda _ctx: c.cursor < len(c.bars), shortcut="Right"),
            Command("replay.seek_here", "Rejouer jusqu'ici", seek_here,
                    when=lambda ctx: bool(c.bars) and (ctx.time is not None or ctx.logical_index is not None)),
        ):
            self.commands.register(cmd)
