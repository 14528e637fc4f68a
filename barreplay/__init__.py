# barreplay/__init__.py
from barreplay.commands import Command, CommandContext, CommandRegistry, build_context_menu_model
from barreplay.data.models import Bar, PlaybackState
from barreplay.errors import DuplicateIdError, ReplayError, UnknownStudyError
from barreplay.replay.controller import ReplayController
from barreplay.studies import StudyDefinition, StudyOutput, StudyPoint, StudyRegistry, default_registry

__version__ = "0.1.0"

__all__ = [
    "Bar", "PlaybackState",
    "Command", "CommandContext", "CommandRegistry", "build_context_menu_model",
    "DuplicateIdError", "ReplayError", "UnknownStudyError",
    "ReplayController",
    "StudyDefinition", "StudyOutput", "StudyPoint", "StudyRegistry", "default_registry",
]
