from .builtin import BUILTIN_STUDIES, bollinger_study, default_registry, ema_study, rsi_study, sma_study
from .registry import StudyRegistry
from .types import LineStudyInstance, RenderTarget, StudyDefinition, StudyInstance, StudyOutput, StudyPoint

__all__ = [
    "BUILTIN_STUDIES", "bollinger_study", "default_registry", "ema_study", "rsi_study", "sma_study",
    "StudyRegistry",
    "LineStudyInstance", "RenderTarget", "StudyDefinition", "StudyInstance", "StudyOutput", "StudyPoint",
]
