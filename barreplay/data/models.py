# Pydantic types (Bar, StudyPoint, ...)
from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Bar(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    time: int            # epoch seconds (UTC)
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = Field(default=None, ge=0)


class PlaybackState(str, Enum):
    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"


def to_bars(items: Iterable[Any]) -> List[Bar]:
    """Validate dicts (or Bars) into a list of Bars strictly increasing in time.

    Raises ``ValueError`` on a duplicate or out-of-order timestamp.
    """
    bars = [b if isinstance(b, Bar) else Bar.model_validate(b) for b in items]
    for prev, cur in zip(bars, bars[1:]):
        if cur.time <= prev.time:
            raise ValueError(
                f"bars must be strictly increasing in time: {cur.time} follows {prev.time}"
            )
    return bars
