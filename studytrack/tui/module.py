"""Contract every dashboard module implements."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple

from rich.text import Text

from studytrack.tui.messages import Cmd


@dataclass(frozen=True)
class Shortcut:
    """Key hint rendered in the footer."""
    key: str
    description: str


class Module(ABC):
    """
    An independently stateful view hosted by the shell.

    id is a stable identifier ('plans'); title is shown in the navigation
    bar ('Plans').
    """
    id: str = ''
    title: str = ''

    @abstractmethod
    def shortcuts(self) -> List[Shortcut]:
        pass

    def init(self) -> Optional[Cmd]:
        """Runs once, the first time the module becomes active."""
        return None

    @abstractmethod
    def update(self, msg) -> Tuple['Module', Optional[Cmd]]:
        pass

    @abstractmethod
    def view(self) -> Text:
        pass

    def captures_input(self) -> bool:
        """True while a text field has focus; the shell then only keeps ctrl+c."""
        return False
