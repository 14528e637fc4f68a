from .controller import MIN_MS_PER_BAR, ReplayController

__all__ = ["MIN_MS_PER_BAR", "ReplayController"]
