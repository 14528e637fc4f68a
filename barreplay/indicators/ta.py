# barreplay/indicators/ta.py
from __future__ import annotations
from math import isfinite
from statistics import mean, pstdev
from typing import List, Optional, Sequence, Tuple

Series = List[Optional[float]]

# ----------------- helpers -----------------
def _ema_next(prev_ema: float, price: float, period: int) -> float:
    k = 2.0 / (period + 1.0)
    return price * k + prev_ema * (1.0 - k)

def ema_series(values: Sequence[float], period: int) -> Series:
    """EMA seeded with the SMA of the first ``period`` values."""
    n = len(values)
    out: Series = [None] * n
    if n < period or period <= 0:
        return out
    ema = sum(values[:period]) / period
    out[period - 1] = ema
    for i in range(period, n):
        ema = _ema_next(ema, values[i], period)
        out[i] = ema
    return out

def sma_series(values: Sequence[float], period: int) -> Series:
    n = len(values)
    out: Series = [None] * n
    if period <= 0 or n < period:
        return out
    s = sum(values[:period])
    out[period - 1] = s / period
    for i in range(period, n):
        s += values[i] - values[i - period]
        out[i] = s / period
    return out

def rolling_bands(values: Sequence[float], period: int, width: float) -> Tuple[Series, Series, Series]:
    """(upper, middle, lower) = mean ± width * population stdev over each full window.
    Slots before the first full window, and windows holding a non-finite
    value, stay None.
    """
    n = len(values)
    up: Series = [None] * n
    mid: Series = [None] * n
    dn: Series = [None] * n
    if period <= 0:
        return up, mid, dn
    for i in range(period - 1, n):
        window = values[i + 1 - period:i + 1]
        if not all(isfinite(v) for v in window):
            continue
        m = mean(window)
        sd = pstdev(window, m)
        mid[i] = m
        up[i] = m + width * sd
        dn[i] = m - width * sd
    return up, mid, dn

def rsi_wilder(values: Sequence[float], period: int = 14) -> Series:
    n = len(values)
    out: Series = [None] * n
    if period <= 0 or n < period + 1:
        return out
    gains, losses = [], []
    for i in range(1, period + 1):
        ch = values[i] - values[i - 1]
        gains.append(max(ch, 0.0))
        losses.append(max(-ch, 0.0))
    avg_gain = sum(gains) / period
    avg_loss = sum(losses) / period
    rsi = 100.0 if avg_loss == 0 else 100.0 - (100.0 / (1.0 + (avg_gain / avg_loss)))
    out[period] = rsi
    for i in range(period + 1, n):
        ch = values[i] - values[i - 1]
        gain = max(ch, 0.0); loss = max(-ch, 0.0)
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        rsi = 100.0 if avg_loss == 0 else 100.0 - (100.0 / (1.0 + (avg_gain / avg_loss)))
        out[i] = rsi
    return out

# ----------------- séries -----------------
def line_points(times: Sequence[int], vs: Series) -> List[Tuple[int, float]]:
    """Pair each defined, finite value with its bar time; warm-up slots are skipped."""
    out: List[Tuple[int, float]] = []
    for t, v in zip(times, vs):
        if v is None or not isfinite(v):
            continue
        out.append((int(t), float(v)))
    return out
