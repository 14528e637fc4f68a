# barreplay/studies/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Protocol, Sequence

from pydantic import BaseModel, ConfigDict

from barreplay.data.models import Bar

Params = Dict[str, Any]


class StudyPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: int
    value: float


class StudyOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: Literal["line"] = "line"
    points: List[StudyPoint] = []


class StudyInstance(Protocol):
    def remove(self) -> None: ...


class RenderTarget(Protocol):
    """What the built-in render hooks draw on. ``ChartBridge`` is the shipped one."""

    def add_line_series(self, series_id: str, points: Sequence[StudyPoint]) -> Any: ...

    def remove_series(self, handle: Any) -> None: ...


@dataclass(frozen=True)
class StudyDefinition:
    id: str
    name: str
    defaults: Params
    compute: Callable[[Sequence[Bar], Params], List[StudyOutput]]
    render: Callable[[Any, List[StudyOutput]], StudyInstance]


@dataclass
class LineStudyInstance:
    """Series handles one ``render`` call allocated on ``target``."""
    id: str
    target: Any
    series: List[Any] = field(default_factory=list)
    outputs: List[StudyOutput] = field(default_factory=list)
    removed: bool = False

    def remove(self) -> None:
        if self.removed:
            return
        self.removed = True
        for handle in self.series:
            self.target.remove_series(handle)


def render_lines(study_id: str, target: RenderTarget, outputs: List[StudyOutput]) -> LineStudyInstance:
    series = [target.add_line_series(o.id, o.points) for o in outputs]
    return LineStudyInstance(id=study_id, target=target, series=series, outputs=list(outputs))
