# barreplay/errors.py
from __future__ import annotations


class ReplayError(Exception):
    """Base class for structural errors raised by the replay core."""


class DuplicateIdError(ReplayError, ValueError):
    """A study or command id is already registered."""

    def __init__(self, kind: str, id: str):
        super().__init__(f"{kind} already registered: {id}")
        self.kind = kind
        self.id = id


class UnknownStudyError(ReplayError, LookupError):
    def __init__(self, study_id: str):
        super().__init__(f"Unknown study: {study_id}")
        self.study_id = study_id
