"""
Messages and commands for the dashboard event loop.

Every event (a key press, a finished service call, a status update) is a
message. A command is a zero-argument callable that does some work and
returns the next message, or None.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

Cmd = Callable[[], Optional[object]]

TOPIC_PLANS_CHANGED = "plan:changed"


@dataclass(frozen=True)
class KeyMsg:
    """A key press: a single character or a named key such as 'enter'."""
    key: str


@dataclass(frozen=True)
class WindowSizeMsg:
    width: int
    height: int


@dataclass(frozen=True)
class ModuleActivatedMsg:
    """Sent to a module each time it becomes the active one."""
    id: str
    first_activation: bool


@dataclass(frozen=True)
class StatusMsg:
    """Footer notification; never forwarded to modules."""
    message: str
    is_error: bool = False


@dataclass(frozen=True)
class BroadcastMsg:
    """Cross-module notification delivered to every inactive module."""
    topic: str
    payload: Any = None


@dataclass(frozen=True)
class QuitMsg:
    pass


@dataclass(frozen=True)
class BatchMsg:
    cmds: Tuple[Cmd, ...]


def batch(*cmds: Optional[Cmd]) -> Optional[Cmd]:
    """Combine commands into one; None entries are dropped."""
    cmds = tuple(c for c in cmds if c is not None)
    if not cmds:
        return None
    if len(cmds) == 1:
        return cmds[0]
    return lambda: BatchMsg(cmds)


def quit_cmd() -> QuitMsg:
    return QuitMsg()


def status_cmd(message: str, is_error: bool = False) -> Cmd:
    return lambda: StatusMsg(message, is_error)


def broadcast_cmd(topic: str, payload: Any = None) -> Cmd:
    return lambda: BroadcastMsg(topic, payload)
