"""prompt_toolkit completer for the rnmaps REPL."""

from __future__ import annotations

import shlex
from typing import Iterable, List

from prompt_toolkit.completion import CompleteEvent, Completer, Completion, PathCompleter
from prompt_toolkit.document import Document

from .commands import CommandRegistry
from .context import ShellContext

SOURCE_COMMANDS = {"reverse", "r"}
PATH_COMMANDS = {"save"}


def _normalise_tokens(text: str) -> List[str]:
    if not text:
        return []
    try:
        tokens = shlex.split(text, posix=True)
        trailing = text[-1].isspace()
    except ValueError:
        tokens = text.strip().split()
        trailing = text.endswith((" ", "\t"))
    if trailing:
        tokens.append("")
    return tokens


class ShellCompleter(Completer):
    """Completes command names, composed-map sources and output paths."""

    def __init__(self, ctx: ShellContext, registry: CommandRegistry) -> None:
        self.ctx = ctx
        self.registry = registry
        self._path = PathCompleter(expanduser=True)

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        tokens = _normalise_tokens(document.text_before_cursor)
        if len(tokens) <= 1:
            prefix = tokens[0] if tokens else ""
            for entry in self._format_candidates(self._command_names(), prefix):
                yield Completion(entry, start_position=-len(prefix))
            return
        command, prefix = tokens[0], tokens[-1]
        if command in PATH_COMMANDS and len(tokens) == 2:
            yield from self._path.get_completions(Document(prefix, cursor_position=len(prefix)), complete_event)
            return
        if command in SOURCE_COMMANDS and len(tokens) == 2:
            for entry in self._format_candidates(self.ctx.source_completions(), prefix):
                yield Completion(entry, start_position=-len(prefix))

    def _command_names(self) -> List[str]:
        names: List[str] = []
        for command in self.registry.list_commands():
            names.append(command.name)
            names.extend(command.aliases)
        return sorted(set(names))

    @staticmethod
    def _format_candidates(candidates: Iterable[str], prefix: str = "") -> List[str]:
        if not prefix:
            return sorted(dict.fromkeys(candidates))
        needle = prefix.lower()
        ordered = [c for c in candidates if c.lower().startswith(needle)]
        return sorted(dict.fromkeys(ordered))
