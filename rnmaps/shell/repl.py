"""Interactive lookup REPL over a composed source map."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, History, InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from .commands import CommandRegistry
from .completion import ShellCompleter
from .context import ShellContext, ShellError

LOGGER = logging.getLogger("rnmaps.shell.repl")


class ShellREPL:
    """prompt_toolkit REPL dispatching to the command registry."""

    def __init__(
        self,
        ctx: ShellContext,
        registry: CommandRegistry,
        *,
        history_path: Optional[Path] = None,
    ) -> None:
        self.ctx = ctx
        self.registry = registry
        self.history_path = Path(history_path).expanduser() if history_path else None

    def build_history(self) -> History:
        """File-backed history when a path is configured and usable, in-memory otherwise."""
        if self.history_path is None:
            return InMemoryHistory()
        try:
            self.history_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            LOGGER.warning("history disabled, cannot create %s: %s", self.history_path.parent, exc)
            return InMemoryHistory()
        return FileHistory(str(self.history_path))

    def build_session(self) -> PromptSession:
        completer = ShellCompleter(self.ctx, self.registry)
        return PromptSession(
            "rnmaps> ",
            history=self.build_history(),
            completer=completer,
            complete_while_typing=True,
        )

    def run(self) -> int:
        session = self.build_session()
        while True:
            try:
                with patch_stdout():
                    line = session.prompt()
            except (EOFError, KeyboardInterrupt):
                print()
                return 0
            try:
                self.dispatch(line)
            except SystemExit as exc:
                return int(exc.code or 0)

    def dispatch(self, line: str) -> int:
        try:
            argv = shlex.split(line)
        except ValueError as exc:
            # shlex reports unbalanced quotes and trailing escapes this way.
            print(f"Parse error: {exc}")
            return 1
        if not argv:
            return 0
        cmd_name, *cmd_args = argv
        command = self.registry.get(cmd_name)
        if not command:
            print(f"Unknown command: {cmd_name}")
            return 1
        try:
            return command.run(self.ctx, cmd_args)
        except SystemExit:
            raise
        except (ShellError, OSError) as exc:
            LOGGER.debug("command %s failed", cmd_name, exc_info=True)
            print(f"Command '{cmd_name}' failed: {exc}")
            return 1
