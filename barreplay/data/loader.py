# barreplay/data/loader.py
from __future__ import annotations

import logging
import random
import time as _time
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .models import Bar

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("time", "open", "high", "low", "close")
DAY_SECONDS = 86_400


def bars_from_frame(df: pd.DataFrame) -> List[Bar]:
    """DataFrame -> list[Bar], sorted by time, duplicate timestamps collapsed (last wins).

    ``time`` may be epoch seconds or a datetime column (naive = UTC).
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"missing bar columns: {', '.join(missing)}")

    df = df.copy()
    if pd.api.types.is_datetime64_any_dtype(df["time"]):
        ts = df["time"]
        if ts.dt.tz is None:
            ts = ts.dt.tz_localize("UTC")
        epoch = pd.Timestamp("1970-01-01", tz="UTC")
        df["time"] = (ts.dt.tz_convert("UTC") - epoch) // pd.Timedelta(seconds=1)

    df = df.sort_values("time", kind="stable").drop_duplicates(subset="time", keep="last")
    vol_col = "volume" if "volume" in df.columns else None

    bars: List[Bar] = []
    for r in df.itertuples(index=False):
        vol = getattr(r, vol_col) if vol_col else None
        bars.append(Bar(
            time=int(getattr(r, "time")),
            open=float(getattr(r, "open")),
            high=float(getattr(r, "high")),
            low=float(getattr(r, "low")),
            close=float(getattr(r, "close")),
            volume=None if vol is None or pd.isna(vol) else float(vol),
        ))
    return bars


def load_csv(path: str | Path) -> List[Bar]:
    path = Path(path)
    df = pd.read_csv(path)
    # header names vary between exports (Time, Close, ...)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "time" in df.columns and not pd.api.types.is_numeric_dtype(df["time"]):
        df["time"] = pd.to_datetime(df["time"], utc=True)
    bars = bars_from_frame(df)
    log.info("Loaded %d bars from %s", len(bars), path)
    return bars


def sample_bars(n: int, seed: Optional[int] = None, start_price: float = 220.0,
                end_time: Optional[int] = None) -> List[Bar]:
    """Random-walk daily candles ending at ``end_time`` (default: now)."""
    rng = random.Random(seed)
    end = int(end_time if end_time is not None else _time.time())
    t = end - n * DAY_SECONDS
    price = start_price
    out: List[Bar] = []

    for _ in range(max(0, n)):
        gap = (rng.random() - 0.5) * 8 if rng.random() < 0.06 else 0.0
        o = max(10.0, price + gap)
        c = max(10.0, o + (rng.random() - 0.5) * 6.5)
        h = max(o, c) + rng.random() * 2.8
        l = min(o, c) - rng.random() * 2.8

        # wide ranges and the odd spike day trade heavier
        base_vol = 8_000_000 + rng.random() * 20_000_000
        range_boost = 1 + min(2.5, (h - l) / 6)
        spike = 20_000_000 + rng.random() * 60_000_000 if rng.random() < 0.05 else 0.0

        out.append(Bar(time=t, open=o, high=h, low=l, close=c,
                       volume=float(int(base_vol * range_boost + spike))))
        t += DAY_SECONDS
        price = c
    return out
