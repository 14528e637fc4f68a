# barreplay/studies/builtin.py
from __future__ import annotations

from dataclasses import replace
from functools import partial
from typing import Any, List, Sequence

from barreplay.data.models import Bar
from barreplay.indicators.ta import ema_series, line_points, rolling_bands, rsi_wilder, sma_series

from .registry import StudyRegistry
from .types import Params, StudyDefinition, StudyOutput, StudyPoint, render_lines


def _period(params: Params, default: int) -> int:
    try:
        return max(1, int(params.get("period", default)))
    except (TypeError, ValueError):
        return default

def _width(params: Params, default: float) -> float:
    try:
        return max(0.0, float(params.get("width", default)))
    except (TypeError, ValueError):
        return default

def _line(output_id: str, times: Sequence[int], values) -> StudyOutput:
    pts = [StudyPoint(time=t, value=v) for t, v in line_points(times, values)]
    return StudyOutput(id=output_id, kind="line", points=pts)

def _closes(bars: Sequence[Bar]) -> tuple[list[int], list[float]]:
    return [b.time for b in bars], [float(b.close) for b in bars]


# ----------------- compute -----------------
def compute_bollinger(bars: Sequence[Bar], params: Params) -> List[StudyOutput]:
    times, closes = _closes(bars)
    up, mid, dn = rolling_bands(closes, _period(params, 20), _width(params, 2.0))
    return [_line("bb.upper", times, up), _line("bb.middle", times, mid), _line("bb.lower", times, dn)]

def compute_sma(bars: Sequence[Bar], params: Params) -> List[StudyOutput]:
    times, closes = _closes(bars)
    return [_line("sma", times, sma_series(closes, _period(params, 20)))]

def compute_ema(bars: Sequence[Bar], params: Params) -> List[StudyOutput]:
    times, closes = _closes(bars)
    return [_line("ema", times, ema_series(closes, _period(params, 20)))]

def compute_rsi(bars: Sequence[Bar], params: Params) -> List[StudyOutput]:
    times, closes = _closes(bars)
    return [_line("rsi", times, rsi_wilder(closes, _period(params, 14)))]


# ----------------- definitions -----------------
bollinger_study = StudyDefinition(
    id="bollinger",
    name="Bollinger Bands",
    defaults={"period": 20, "width": 2.0},
    compute=compute_bollinger,
    render=partial(render_lines, "bollinger"),
)

sma_study = StudyDefinition(
    id="sma",
    name="Simple Moving Average",
    defaults={"period": 20},
    compute=compute_sma,
    render=partial(render_lines, "sma"),
)

ema_study = StudyDefinition(
    id="ema",
    name="Exponential Moving Average",
    defaults={"period": 20},
    compute=compute_ema,
    render=partial(render_lines, "ema"),
)

rsi_study = StudyDefinition(
    id="rsi",
    name="Relative Strength Index",
    defaults={"period": 14},
    compute=compute_rsi,
    render=partial(render_lines, "rsi"),
)

BUILTIN_STUDIES = (bollinger_study, sma_study, ema_study, rsi_study)


def default_registry(**overrides: Any) -> StudyRegistry:
    """Registry pre-loaded with the built-in studies.

    ``overrides`` maps a study id to replacement defaults, e.g.
    ``default_registry(bollinger={"period": 50})``.
    """
    reg = StudyRegistry()
    for definition in BUILTIN_STUDIES:
        extra = overrides.get(definition.id)
        if extra:
            definition = replace(definition, defaults={**definition.defaults, **extra})
        reg.register(definition)
    return reg
