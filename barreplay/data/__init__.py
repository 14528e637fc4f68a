from .loader import bars_from_frame, load_csv, sample_bars
from .models import Bar, PlaybackState, to_bars

__all__ = ["Bar", "PlaybackState", "to_bars", "bars_from_frame", "load_csv", "sample_bars"]
