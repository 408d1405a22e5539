"""
App Shell

Hosts a fixed, ordered set of modules with exactly one active at a time.
Global keys are handled here before the active module sees them:

  ctrl+c / q      : Quit
  tab / shift+tab : Next / previous module
  1-9             : Jump to module
"""

from typing import Dict, List, Optional, Sequence, Tuple

from rich.text import Text

from studytrack.tui.messages import (
    BroadcastMsg, Cmd, KeyMsg, ModuleActivatedMsg, StatusMsg, WindowSizeMsg,
    batch, quit_cmd,
)
from studytrack.tui.module import Module, Shortcut
from studytrack.tui.theme import Theme
from studytrack.utils.exceptions import ModuleRegistrationError
from studytrack.utils.logger import get_logger

logger = get_logger("tui.app")

GLOBAL_SHORTCUTS = [
    Shortcut("Tab/Shift+Tab", "switch module"),
    Shortcut("1…9", "jump to module"),
    Shortcut("q", "quit"),
]


class AppShell:
    """Navigation shell that owns every module and routes messages to them."""

    def __init__(self, modules: Sequence[Module]):
        if not modules:
            raise ModuleRegistrationError("at least one module is required", error_code="NO_MODULES")

        self.modules: Dict[str, Module] = {}
        self.order: List[str] = []
        for i, module in enumerate(modules):
            module_id = getattr(module, 'id', '')
            if not module_id:
                raise ModuleRegistrationError(
                    f"module at index {i} has empty ID",
                    error_code="EMPTY_MODULE_ID",
                    details={'index': i}
                )
            if module_id in self.modules:
                raise ModuleRegistrationError(
                    f"duplicate module ID: {module_id}",
                    error_code="DUPLICATE_MODULE_ID",
                    details={'id': module_id}
                )
            self.modules[module_id] = module
            self.order.append(module_id)

        self.active_id = self.order[0]
        self.initialized = set()
        self.activated = set()
        self.status: Optional[StatusMsg] = None
        self.width = 80
        self.height = 24

    @property
    def active_module(self) -> Module:
        return self.modules[self.active_id]

    def init(self) -> Optional[Cmd]:
        """Initialize the first module and tell it that it is active."""
        active_id = self.active_id
        self.initialized.add(active_id)
        self.activated.add(active_id)
        return batch(
            self.active_module.init(),
            lambda: ModuleActivatedMsg(active_id, True),
        )

    # ========================================================================
    # UPDATE
    # ========================================================================

    def update(self, msg) -> Tuple['AppShell', Optional[Cmd]]:
        if isinstance(msg, KeyMsg):
            handled, cmd = self._handle_key(msg)
            if handled:
                return self, cmd
        elif isinstance(msg, ModuleActivatedMsg):
            if msg.id != self.active_id:
                return self, None
        elif isinstance(msg, StatusMsg):
            self.status = msg
            return self, None
        elif isinstance(msg, BroadcastMsg):
            return self, self._handle_broadcast(msg)
        elif isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            self.height = msg.height
            return self, None

        updated, cmd = self.active_module.update(msg)
        self.modules[self.active_id] = updated
        return self, cmd

    def _handle_key(self, msg: KeyMsg) -> Tuple[bool, Optional[Cmd]]:
        key = msg.key
        if key == 'ctrl+c':
            return True, quit_cmd
        if self.active_module.captures_input():
            return False, None

        if key == 'q':
            return True, quit_cmd
        if key == 'tab':
            self._rotate(1)
            return True, self._activate_current()
        if key == 'shift+tab':
            self._rotate(-1)
            return True, self._activate_current()
        if len(key) == 1 and '1' <= key <= '9':
            idx = int(key) - 1
            if idx < len(self.order):
                if self.order[idx] == self.active_id:
                    return True, None
                self.active_id = self.order[idx]
                return True, self._activate_current()
        return False, None

    def _handle_broadcast(self, msg: BroadcastMsg) -> Optional[Cmd]:
        cmds = []
        for module_id in self.order:
            if module_id == self.active_id:
                continue
            updated, cmd = self.modules[module_id].update(msg)
            self.modules[module_id] = updated
            cmds.append(cmd)
        logger.debug("Broadcast delivered", topic=msg.topic, receivers=len(self.order) - 1)
        return batch(*cmds)

    def _rotate(self, direction: int):
        idx = self.order.index(self.active_id)
        self.active_id = self.order[(idx + direction) % len(self.order)]

    def _activate_current(self) -> Optional[Cmd]:
        module = self.active_module
        cmds = []

        if self.active_id not in self.initialized:
            cmds.append(module.init())
            self.initialized.add(self.active_id)

        first = self.active_id not in self.activated
        updated, cmd = module.update(ModuleActivatedMsg(self.active_id, first))
        self.modules[self.active_id] = updated
        cmds.append(cmd)
        self.activated.add(self.active_id)

        logger.debug("Module activated", module=self.active_id, first_activation=first)
        return batch(*cmds)

    # ========================================================================
    # VIEW
    # ========================================================================

    def view(self) -> Text:
        """Navigation bar, active module body and footer."""
        text = self._render_navigation()
        text.append("\n")
        text.append_text(self.active_module.view())
        text.append("\n")
        text.append_text(self._render_footer())
        return text

    def _render_navigation(self) -> Text:
        text = Text()
        for i, module_id in enumerate(self.order):
            if i > 0:
                text.append(" │ ", style=Theme.BORDER)
            label = f"{i + 1}·{self.modules[module_id].title}"
            if module_id == self.active_id:
                text.append(label, style=Theme.NAV_ACTIVE)
            else:
                text.append(label, style="bold")
        return text

    def _render_footer(self) -> Text:
        text = Text()
        shortcuts = GLOBAL_SHORTCUTS + list(self.active_module.shortcuts())
        for i, sc in enumerate(shortcuts):
            if i > 0:
                text.append("  ")
            text.append(sc.key, style=Theme.KEY)
            text.append(f" {sc.description}", style=Theme.DIM)

        if self.status is not None:
            text.append("\n")
            style = Theme.ERROR if self.status.is_error else Theme.INFO
            text.append(self.status.message, style=style)
        return text
