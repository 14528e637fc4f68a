# barreplay/studies/registry.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from barreplay.data.models import Bar
from barreplay.errors import DuplicateIdError, UnknownStudyError

from .types import Params, StudyDefinition, StudyInstance, StudyOutput

log = logging.getLogger(__name__)


class StudyRegistry:
    """id -> StudyDefinition. Holds no state between calls beyond the table itself."""

    def __init__(self):
        self._defs: Dict[str, StudyDefinition] = {}

    def register(self, definition: StudyDefinition) -> Callable[[], None]:
        if definition.id in self._defs:
            raise DuplicateIdError("Study", definition.id)
        self._defs[definition.id] = definition
        log.debug("study registered: %s", definition.id)

        def unregister() -> None:
            if self._defs.get(definition.id) is definition:
                del self._defs[definition.id]
        return unregister

    def get(self, study_id: str) -> Optional[StudyDefinition]:
        return self._defs.get(study_id)

    def list(self) -> List[StudyDefinition]:
        return list(self._defs.values())

    def __contains__(self, study_id: object) -> bool:
        return study_id in self._defs

    # ---------- compute / attach ----------
    def _resolve(self, study_id: str, params: Optional[Mapping[str, Any]]) -> tuple[StudyDefinition, Params]:
        definition = self._defs.get(study_id)
        if definition is None:
            raise UnknownStudyError(study_id)
        # shallow: caller keys win, nested values are not merged
        return definition, {**definition.defaults, **(params or {})}

    def compute(self, bars: Sequence[Bar], study_id: str,
                params: Optional[Mapping[str, Any]] = None) -> List[StudyOutput]:
        definition, merged = self._resolve(study_id, params)
        return definition.compute(bars, merged)

    def attach(self, target: Any, bars: Sequence[Bar], study_id: str,
               params: Optional[Mapping[str, Any]] = None) -> StudyInstance:
        """Compute ``study_id`` over ``bars`` and render onto ``target``.

        The returned instance belongs to the caller, who must ``remove()`` it.
        """
        definition, merged = self._resolve(study_id, params)
        outputs = definition.compute(bars, merged)
        log.debug("attach %s over %d bars -> %d outputs", study_id, len(bars), len(outputs))
        return definition.render(target, outputs)
