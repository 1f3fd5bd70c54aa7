import json

import pytest
from prompt_toolkit.document import Document
from prompt_toolkit.history import FileHistory, InMemoryHistory

from rnmaps.shell.cli import main
from rnmaps.shell.commands import build_registry
from rnmaps.shell.completion import ShellCompleter
from rnmaps.shell.context import ShellContext
from rnmaps.shell.repl import ShellREPL

from conftest import write_map


@pytest.fixture
def bundle_file(app_chain):
    return write_map(app_chain["root"] / "index.bundle.map", app_chain["bundle"])


@pytest.fixture
def loaded_ctx(bundle_file):
    ctx = ShellContext()
    ctx.load_bundle(bundle_file)
    return ctx


def test_cli_writes_composed_map(bundle_file, app_chain, tmp_path) -> None:
    out = tmp_path / "composed.map"
    assert main([str(bundle_file), "-o", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["sources"] == [str(app_chain["root"] / "app.ts")]


def test_cli_prints_to_stdout_by_default(bundle_file, capsys) -> None:
    assert main([str(bundle_file)]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["names"] == ["run"]


def test_cli_single_command_lookup(bundle_file, app_chain, capsys) -> None:
    assert main([str(bundle_file), "--json", "-c", "lookup 10 6"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["status"] == "ok"
    assert payload["result"]["source"] == str(app_chain["root"] / "app.ts")
    assert payload["result"]["line"] == 1


def test_cli_reports_unreadable_bundle(tmp_path) -> None:
    assert main([str(tmp_path / "missing.map")]) == 1
    broken = tmp_path / "broken.map"
    broken.write_text('{"version": 7}', encoding="utf-8")
    assert main([str(broken)]) == 1


def test_repl_dispatch(loaded_ctx, app_chain, capsys, tmp_path) -> None:
    repl = ShellREPL(loaded_ctx, build_registry())
    assert repl.dispatch("lookup 10 4") == 0
    assert "app.ts:1:0 (run)" in capsys.readouterr().out
    assert repl.dispatch("lookup 1 0") == 1
    assert repl.dispatch("lookup ten 4") == 2
    assert repl.dispatch(f"reverse {app_chain['root'] / 'app.ts'} 1 0") == 0
    assert "bundle:10:4" in capsys.readouterr().out
    assert repl.dispatch("frobnicate") == 1
    assert repl.dispatch('lookup "10') == 1
    assert repl.dispatch("") == 0

    target = tmp_path / "saved.map"
    assert repl.dispatch(f"save {target}") == 0
    assert json.loads(target.read_text(encoding="utf-8")) == loaded_ctx.composed


def test_repl_stats_and_exit(loaded_ctx, capsys) -> None:
    repl = ShellREPL(loaded_ctx, build_registry())
    assert repl.dispatch("stats") == 0
    out = capsys.readouterr().out
    assert "rewritten=1" in out
    assert "found" in out
    with pytest.raises(SystemExit):
        repl.dispatch("quit")


def test_commands_without_loaded_map_fail_cleanly(capsys) -> None:
    repl = ShellREPL(ShellContext(), build_registry())
    assert repl.dispatch("sources") == 1
    assert "no source map loaded" in capsys.readouterr().out


def test_repl_history_is_file_backed(loaded_ctx, tmp_path) -> None:
    path = tmp_path / "hist" / "history"
    history = ShellREPL(loaded_ctx, build_registry(), history_path=path).build_history()
    assert isinstance(history, FileHistory)
    history.store_string("lookup 10 4")
    assert list(FileHistory(str(path)).load_history_strings()) == ["lookup 10 4"]
    assert isinstance(ShellREPL(loaded_ctx, build_registry()).build_history(), InMemoryHistory)


def test_repl_dispatch_quoting_and_parse_errors(loaded_ctx, app_chain, capsys) -> None:
    repl = ShellREPL(loaded_ctx, build_registry())
    assert repl.dispatch(f"reverse '{app_chain['root'] / 'app.ts'}' 1 0") == 0
    assert "bundle:10:4" in capsys.readouterr().out
    assert repl.dispatch('lookup "10 4') == 1
    assert "Parse error: No closing quotation" in capsys.readouterr().out
    assert repl.dispatch("   ") == 0


def test_json_mode_reports_failed_lookup_with_query(loaded_ctx, capsys) -> None:
    loaded_ctx.json_output = True
    repl = ShellREPL(loaded_ctx, build_registry())
    assert repl.dispatch("lookup 1 0") == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload == {"status": "error", "error": "no mapping at 1:0", "query": {"line": 1, "column": 0}}
    assert repl.dispatch("reverse nowhere.ts") == 2
    assert json.loads(capsys.readouterr().out)["error"] == "usage: reverse SOURCE LINE COL"


def test_completion_offers_commands_and_sources(loaded_ctx, app_chain) -> None:
    completer = ShellCompleter(loaded_ctx, build_registry())
    results = {c.text for c in completer.get_completions(Document("lo", cursor_position=2), None)}
    assert "lookup" in results

    text = f"reverse {str(app_chain['root'])[:4]}"
    results = {c.text for c in completer.get_completions(Document(text, cursor_position=len(text)), None)}
    assert str(app_chain["root"] / "app.ts") in results


def test_completion_offers_paths_for_save(loaded_ctx, tmp_path) -> None:
    (tmp_path / "composed.map").write_text("{}", encoding="utf-8")
    completer = ShellCompleter(loaded_ctx, build_registry())
    text = f"save {(tmp_path / 'compo').as_posix()}"
    results = {c.text for c in completer.get_completions(Document(text, cursor_position=len(text)), None)}
    assert any(entry.endswith("sed.map") for entry in results)
