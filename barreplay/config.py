# barreplay/config.py
import os

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


# =========================
#  Playback
# =========================

# Cadence of the replay timer. Anything under 10 ms is clamped by the controller.
REPLAY_MS_PER_BAR: int = _int_env("REPLAY_MS_PER_BAR", 120)

# Trailing cap on the visible window; 0 disables the cap.
REPLAY_WINDOW_SIZE: int = _int_env("REPLAY_WINDOW_SIZE", 160)

# =========================
#  Data source
# =========================

# CSV with time/open/high/low/close[/volume] columns. Empty = generated sample.
REPLAY_CSV: str = os.getenv("REPLAY_CSV", "").strip()

SAMPLE_BARS: int = _int_env("SAMPLE_BARS", 260)

# Empty = a different random walk on every run.
SAMPLE_SEED: int | None = _int_env("SAMPLE_SEED", 0) if os.getenv("SAMPLE_SEED", "").strip() else None

# =========================
#  Studies
# =========================

BB_PERIOD: int = _int_env("BB_PERIOD", 20)
BB_WIDTH: float = _float_env("BB_WIDTH", 2.0)

# =========================
#  Logs
# =========================

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
