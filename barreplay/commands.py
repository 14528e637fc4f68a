# barreplay/commands.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from barreplay.errors import DuplicateIdError


@dataclass(frozen=True)
class CommandContext:
    """Where a command was invoked from; any field may be unknown (None)."""
    time: Optional[int] = None
    price: Optional[float] = None
    logical_index: Optional[int] = None


@dataclass(frozen=True)
class Command:
    id: str
    label: str
    run: Callable[[CommandContext], None]
    when: Optional[Callable[[CommandContext], bool]] = None
    shortcut: Optional[str] = None
    icon: Optional[str] = None  # UI layer decides how to draw it

    def enabled(self, ctx: CommandContext) -> bool:
        return self.when(ctx) if self.when else True


class CommandRegistry:
    def __init__(self):
        self._commands: Dict[str, Command] = {}

    def register(self, cmd: Command) -> Callable[[], None]:
        if cmd.id in self._commands:
            raise DuplicateIdError("Command", cmd.id)
        self._commands[cmd.id] = cmd

        def unregister() -> None:
            if self._commands.get(cmd.id) is cmd:
                del self._commands[cmd.id]
        return unregister

    def get(self, cmd_id: str) -> Optional[Command]:
        return self._commands.get(cmd_id)

    def list(self, ctx: CommandContext) -> List[Command]:
        return [c for c in self._commands.values() if c.enabled(ctx)]


# ----------------- context menu -----------------
@dataclass(frozen=True)
class ContextMenuItem:
    id: str
    label: str
    on_click: Callable[[], None]
    shortcut: Optional[str] = None
    disabled: bool = False


@dataclass(frozen=True)
class ContextMenuModel:
    x: float
    y: float
    items: List[ContextMenuItem] = field(default_factory=list)


def build_context_menu_model(registry: CommandRegistry, ctx: CommandContext,
                             x: float, y: float) -> ContextMenuModel:
    items = [
        ContextMenuItem(
            id=c.id,
            label=c.label,
            shortcut=c.shortcut,
            disabled=not c.enabled(ctx),
            on_click=lambda c=c: c.run(ctx),
        )
        for c in registry.list(ctx)
    ]
    return ContextMenuModel(x=x, y=y, items=items)
