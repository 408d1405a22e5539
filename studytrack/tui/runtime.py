"""
Line-mode event loop for the dashboard.

One thread consumes the message queue and owns the model. Commands run on a
worker pool and post their results back to the queue; keyboard input is read
a line at a time on a daemon thread.

Input lines:
  <empty>          : enter
  j j enter        : named keys and single characters, space separated
  :some text       : type the literal characters after the colon
"""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from rich.console import Console

from studytrack.tui.messages import BatchMsg, Cmd, KeyMsg, QuitMsg, StatusMsg, WindowSizeMsg
from studytrack.utils.logger import get_logger

logger = get_logger("tui.runtime")

NAMED_KEYS = {
    'enter', 'esc', 'tab', 'shift+tab', 'up', 'down', 'left', 'right',
    'backspace', 'ctrl+c',
}

KEY_ALIASES = {
    'space': ' ',
    'return': 'enter',
    'escape': 'esc',
    'btab': 'shift+tab',
    'bs': 'backspace',
}


def parse_keys(line: str) -> List[str]:
    """Translate one input line into key names."""
    if line.startswith(':'):
        return list(line[1:])

    tokens = line.split()
    if not tokens:
        return ['enter']

    keys = []
    for token in tokens:
        lowered = token.lower()
        if lowered in KEY_ALIASES:
            keys.append(KEY_ALIASES[lowered])
        elif lowered in NAMED_KEYS:
            keys.append(lowered)
        else:
            keys.extend(token)
    return keys


class Program:
    """Runs a model (anything with init/update/view) until it quits."""

    def __init__(self, model, console: Optional[Console] = None,
                 input_func: Optional[Callable[[], str]] = None, max_workers: int = 4):
        self.model = model
        self.console = console or Console()
        self.input_func = input_func or self._prompt
        self.queue: "queue.Queue" = queue.Queue()
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="studytrack-cmd")
        self.running = False

    def _prompt(self) -> str:
        return self.console.input("[dim]›[/] ")

    def send(self, msg):
        self.queue.put(msg)

    def dispatch(self, cmd: Optional[Cmd]):
        if cmd is not None:
            self.executor.submit(self._run_cmd, cmd)

    def _run_cmd(self, cmd: Cmd):
        try:
            msg = cmd()
        except Exception as e:
            logger.error("Command failed", error=str(e))
            msg = StatusMsg(f"Error: {e}", True)
        if msg is not None:
            self.queue.put(msg)

    def _read_input(self):
        while self.running:
            try:
                line = self.input_func()
            except (EOFError, KeyboardInterrupt):
                self.queue.put(KeyMsg('ctrl+c'))
                return
            for key in parse_keys(line):
                self.queue.put(KeyMsg(key))

    def render(self):
        self.console.clear()
        self.console.print(self.model.view())

    def run(self):
        """Block until a QuitMsg arrives; returns the final model."""
        self.running = True
        size = self.console.size
        self.send(WindowSizeMsg(size.width, size.height))
        self.dispatch(self.model.init())

        reader = threading.Thread(target=self._read_input, name="studytrack-input", daemon=True)
        reader.start()
        logger.info("Dashboard started")

        try:
            while self.running:
                msg = self.queue.get()
                if isinstance(msg, QuitMsg):
                    break
                if isinstance(msg, BatchMsg):
                    for cmd in msg.cmds:
                        self.dispatch(cmd)
                    continue

                self.model, cmd = self.model.update(msg)
                self.dispatch(cmd)
                self.render()
        finally:
            self.running = False
            self.executor.shutdown(wait=False)
            logger.info("Dashboard stopped")

        self.console.print("\n[bold bright_cyan]👋 Thanks for using StudyTrack![/]\n")
        return self.model
