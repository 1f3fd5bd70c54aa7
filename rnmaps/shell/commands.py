"""Commands understood by the rnmaps REPL and ``rnmaps -c``."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .context import ShellContext
from .output import describe_generated, describe_original, generated_fields, original_fields, report


@dataclass
class Command:
    """Abstract command description."""

    name: str
    description: str
    usage: str = ""
    aliases: Sequence[str] = field(default_factory=tuple)

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        raise NotImplementedError("Command must implement run()")

    def format_help(self) -> str:
        return f"{self.name:<12} {self.description}"

    def usage_error(self, ctx: ShellContext) -> int:
        return report(ctx, f"usage: {self.name} {self.usage}".rstrip(), exit_code=2)


def _parse_position(args: Sequence[str]) -> Optional[tuple[int, int]]:
    try:
        line, column = int(args[0]), int(args[1])
    except (IndexError, ValueError):
        return None
    if line < 1 or column < 0:
        return None
    return line, column


class HelpCommand(Command):
    def __init__(self) -> None:
        super().__init__("help", "Show available commands", aliases=("?",))
        self._registry: Optional[CommandRegistry] = None

    def bind(self, registry: "CommandRegistry") -> None:
        self._registry = registry

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        registry = self._registry
        if not registry:
            return 1
        for command in registry.list_commands():
            print(command.format_help())
        return 0


class LookupCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "lookup",
            "Original position for a bundle LINE COL",
            usage="LINE COL",
            aliases=("l",),
        )

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        position = _parse_position(argv)
        if position is None:
            return self.usage_error(ctx)
        line, column = position
        found = ctx.consumer.original_position_for(line, column)
        if not found.found:
            return report(ctx, f"no mapping at {line}:{column}", {"line": line, "column": column}, exit_code=1)
        return report(ctx, describe_original(found), original_fields(found))


class ReverseCommand(Command):
    def __init__(self) -> None:
        super().__init__(
            "reverse",
            "Bundle position for SOURCE LINE COL",
            usage="SOURCE LINE COL",
            aliases=("r",),
        )

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        position = _parse_position(argv[1:])
        if not argv or position is None:
            return self.usage_error(ctx)
        source, (line, column) = argv[0], position
        generated = ctx.consumer.generated_position_for(source, line, column)
        if generated is None:
            query = {"source": source, "line": line, "column": column}
            return report(ctx, f"no bundle position for {source}:{line}:{column}", query, exit_code=1)
        return report(ctx, describe_generated(generated), generated_fields(generated))


class SourcesCommand(Command):
    def __init__(self) -> None:
        super().__init__("sources", "List sources in the composed map")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        sources = ctx.consumer.sources
        return report(ctx, "\n".join(sources) if sources else "(no sources)", {"sources": sources})


class StatsCommand(Command):
    def __init__(self) -> None:
        super().__init__("stats", "Show what happened during composition", aliases=("status",))

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        composition = ctx.report
        if composition is None:
            return report(ctx, "no source map loaded", exit_code=1)
        data = {
            "bundle": str(ctx.bundle_path) if ctx.bundle_path else None,
            "short_circuited": composition.short_circuited,
            "rewritten": composition.rewritten,
            "passed_through": composition.passed_through,
            "dropped_unmapped": composition.dropped_unmapped,
            "dropped_unresolved": composition.dropped_unresolved,
            "rejected": composition.rejected,
            "sources": {source: result.reason.value for source, result in composition.locate_results.items()},
        }
        report(ctx, composition.summary(), data)
        if not ctx.json_output:
            for source, result in composition.locate_results.items():
                print(f"  {result.reason.value:<10} {source}")
        return 0


class SaveCommand(Command):
    def __init__(self) -> None:
        super().__init__("save", "Write the composed map to PATH", usage="PATH")

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        if len(argv) != 1:
            return self.usage_error(ctx)
        target = Path(argv[0]).expanduser()
        target.write_text(ctx.dumps() + "\n", encoding="utf-8")
        return report(ctx, f"wrote {target}", {"path": str(target)})


class ExitCommand(Command):
    def __init__(self) -> None:
        super().__init__("exit", "Leave the shell", aliases=("quit", "q"))

    def run(self, ctx: ShellContext, argv: List[str]) -> int:
        raise SystemExit(0)


class CommandRegistry:
    """Stores the known commands and resolves aliases."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._ordered: List[Command] = []

    def register(self, command: Command) -> None:
        self._ordered.append(command)
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def list_commands(self) -> Iterable[Command]:
        return self._ordered


def build_registry() -> CommandRegistry:
    registry = CommandRegistry()
    commands = [
        HelpCommand(),
        LookupCommand(),
        ReverseCommand(),
        SourcesCommand(),
        StatsCommand(),
        SaveCommand(),
        ExitCommand(),
    ]
    for command in commands:
        registry.register(command)
        bind = getattr(command, "bind", None)
        if callable(bind):
            bind(registry)
    return registry


__all__ = ["Command", "CommandRegistry", "build_registry"]
