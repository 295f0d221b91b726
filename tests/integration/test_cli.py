import re

import click
import pytest
import typer
from typer.testing import CliRunner

import vimman.cache as cache
from vimman import cli
from vimman.cli import app
from vimman.config import load_config
from vimman.text import Messages


ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    return ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def temp_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    config_dir = tmp_path / "config"
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("EDITOR", raising=False)
    monkeypatch.setattr("vimman.config.CONFIG_DIR", config_dir)
    monkeypatch.setattr("vimman.config.CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(cache, "CACHE_DIR", tmp_path / "cache")
    return home


@pytest.fixture
def editor_calls(monkeypatch):
    calls = []

    def fake_run(command):
        calls.append(list(command))
        return 1

    monkeypatch.setattr("vimman.services.editor_service._run_command", fake_run)
    return calls


def _make_doc(base, *parts):
    path = base.joinpath(*parts)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("*help*", encoding="utf-8")
    return path


def test_no_arguments_is_an_error(editor_calls):
    result = CliRunner().invoke(app, [])

    assert result.exit_code == 1
    assert "ERROR: not enough arguments" in strip_ansi(result.stdout)
    assert editor_calls == []


def test_help_mode_runs_vim_help_and_ignores_editor_status(editor_calls):
    result = CliRunner().invoke(app, ["fugitive"])

    assert result.exit_code == 0
    assert ":help fugitive" in result.stdout
    assert editor_calls == [["vim", "-c", ":help fugitive | only"]]


@pytest.mark.parametrize("topic", ["--noplugin", "-d", "-foo", "--cmd=x"])
def test_dash_prefixed_topics_open_help(editor_calls, topic):
    result = CliRunner().invoke(app, [topic])

    assert result.exit_code == 0
    assert editor_calls == [["vim", "-c", f":help {topic} | only"]]


def test_dash_prefixed_topic_with_edit_flag(temp_home, editor_calls):
    doc = _make_doc(temp_home, ".vim", "doc", "-weird.txt")

    result = CliRunner().invoke(app, ["-weird.txt", "-e"])

    assert result.exit_code == 0
    assert editor_calls == [["vim", str(doc)]]


def test_group_options_are_not_topics(editor_calls):
    assert CliRunner().invoke(app, ["-v"]).exit_code == 0
    assert CliRunner().invoke(app, ["--help"]).exit_code == 0
    assert editor_calls == []


def test_open_subcommand_is_equivalent(editor_calls):
    result = CliRunner().invoke(app, ["open", "surround"])

    assert result.exit_code == 0
    assert editor_calls == [["vim", "-c", ":help surround | only"]]


def test_help_mode_uses_vim_flavoured_editor(monkeypatch, editor_calls):
    monkeypatch.setenv("EDITOR", "nvim")
    CliRunner().invoke(app, ["tags"])
    monkeypatch.setenv("EDITOR", "nano")
    CliRunner().invoke(app, ["tags"])

    assert editor_calls[0][0] == "nvim"
    assert editor_calls[1][0] == "vim"


def test_edit_mode_without_name(editor_calls):
    result = CliRunner().invoke(app, ["-e"])

    assert result.exit_code == 1
    assert "ERROR: not enough arguments (-e)" in strip_ansi(result.stdout)
    assert editor_calls == []


def test_edit_mode_without_match(editor_calls):
    result = CliRunner().invoke(app, ["-e", "missing.txt"])

    assert result.exit_code == 1
    assert "No manual entry for missing.txt" in result.stdout
    assert editor_calls == []


def test_edit_mode_opens_every_match(temp_home, editor_calls):
    bundle = temp_home / ".vim" / "bundle"
    first = _make_doc(bundle, "alpha", "doc", "foo.txt")
    second = _make_doc(bundle, "beta", "doc", "foo.txt")
    _make_doc(bundle, ".neobundle", "gamma", "doc", "foo.txt")
    assert CliRunner().invoke(app, ["config", "--add-dir", "~/.vim/bundle"]).exit_code == 0

    result = CliRunner().invoke(app, ["-e", "foo.txt"])

    assert result.exit_code == 0
    assert "~/.vim/bundle/alpha/doc/foo.txt" in result.stdout
    assert "~/.vim/bundle/beta/doc/foo.txt" in result.stdout
    assert editor_calls == [["vim", str(first), str(second)]]


def test_edit_flag_after_name(temp_home, editor_calls):
    doc = _make_doc(temp_home, ".vim", "doc", "local.txt")

    result = CliRunner().invoke(app, ["local.txt", "-e"])

    assert result.exit_code == 0
    assert editor_calls == [["vim", str(doc)]]


def test_edit_mode_reports_missing_editor(monkeypatch, temp_home):
    _make_doc(temp_home, ".vim", "doc", "local.txt")

    def missing(command):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr("vimman.services.editor_service._run_command", missing)

    result = CliRunner().invoke(app, ["-e", "local.txt"])

    assert result.exit_code == 127
    assert "Unable to launch editor" in strip_ansi(result.stdout)


def test_list_uses_cache_until_refresh(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    runner = CliRunner()

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert result.stdout.split() == ["first.txt"]

    _make_doc(temp_home, ".vim", "doc", "second.jax")
    result = runner.invoke(app, ["list"])
    assert result.stdout.split() == ["first.txt"]

    result = runner.invoke(app, ["list", "--refresh"])
    assert result.stdout.split() == ["first.txt", "second.jax"]


def test_list_verbose_collapses_home(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")

    result = CliRunner().invoke(app, ["list", "--verbose"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "first.txt:~/.vim/doc"


def test_list_verbose_follows_config(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    runner = CliRunner()
    runner.invoke(app, ["config", "--set-verbose", "true"])

    assert runner.invoke(app, ["list"]).stdout.strip() == "first.txt:~/.vim/doc"
    assert runner.invoke(app, ["list", "--no-verbose"]).stdout.strip() == "first.txt"


def test_list_without_help_files():
    result = CliRunner().invoke(app, ["list"])

    assert result.exit_code == 0
    assert Messages.INFO_NO_HELP_FILES in strip_ansi(result.stdout)


def test_cache_show_clear_and_rebuild(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    runner = CliRunner()

    shown = strip_ansi(runner.invoke(app, ["cache", "--show"]).stdout)
    assert "State: absent" in shown

    rebuilt = runner.invoke(app, ["cache", "--rebuild"])
    assert rebuilt.exit_code == 0
    assert "rebuilt with 1 help file(s)" in strip_ansi(rebuilt.stdout)

    shown = strip_ansi(runner.invoke(app, ["cache"]).stdout)
    assert "State: fresh" in shown
    assert "Help files: 1" in shown
    assert "Expires after: 7 day(s)" in shown

    assert Messages.INFO_CACHE_CLEARED in strip_ansi(runner.invoke(app, ["cache", "--clear"]).stdout)
    assert Messages.INFO_CACHE_CLEAR_NONE in strip_ansi(runner.invoke(app, ["cache", "--clear"]).stdout)


def test_unusable_cache_database_is_replaced(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    db_file = cache.cache_db_path()
    db_file.parent.mkdir(parents=True)
    db_file.write_bytes(b"not a sqlite database at all" * 10)
    runner = CliRunner()

    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert result.stdout.split() == ["first.txt"]

    db_file.write_bytes(b"not a sqlite database at all" * 10)
    result = runner.invoke(app, ["cache", "--clear"])
    assert result.exit_code == 0
    assert Messages.INFO_CACHE_CLEARED in strip_ansi(result.stdout)
    assert not db_file.exists()


def test_cache_options_conflict():
    result = CliRunner().invoke(app, ["cache", "--show", "--clear"])

    assert result.exit_code == 2


def test_config_add_dir_invalidates_cache(temp_home, tmp_path):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    _make_doc(tmp_path, "plugins", "extra", "doc", "extra.txt")
    runner = CliRunner()
    runner.invoke(app, ["list"])

    result = runner.invoke(app, ["config", "--add-dir", str(tmp_path / "plugins")])

    assert result.exit_code == 0
    output = strip_ansi(result.stdout)
    assert "Added plugin directory" in output
    assert Messages.INFO_CACHE_INVALIDATED in output
    assert load_config().dirs == [str(tmp_path / "plugins")]
    assert runner.invoke(app, ["list"]).stdout.split() == ["extra.txt", "first.txt"]


def test_config_remove_unknown_dir_keeps_cache(temp_home):
    _make_doc(temp_home, ".vim", "doc", "first.txt")
    runner = CliRunner()
    runner.invoke(app, ["list"])

    result = runner.invoke(app, ["config", "--remove-dir", "~/nowhere"])

    output = strip_ansi(result.stdout)
    assert "is not configured" in output
    assert Messages.INFO_CACHE_INVALIDATED not in output
    assert cache.load_record("vimman") is not None


@pytest.mark.parametrize(
    "args",
    [
        ["config", "--set-expire", "0"],
        ["config", "--set-expire", "-3"],
        ["config", "--set-verbose", "maybe"],
    ],
)
def test_config_rejects_invalid_values(args):
    result = CliRunner().invoke(app, args)

    assert result.exit_code == 2


def test_config_set_expire_and_show(temp_home):
    (temp_home / ".vim" / "doc").mkdir(parents=True)
    runner = CliRunner()

    assert runner.invoke(app, ["config", "--set-expire", "3"]).exit_code == 0
    assert runner.invoke(app, ["config", "--add-dir", "~/missing"]).exit_code == 0
    result = runner.invoke(app, ["config", "--show"])

    output = strip_ansi(result.stdout)
    assert "Cache expiration: 3 day(s)" in output
    assert "Verbose completion: no" in output
    assert "~/missing" in output
    assert "~/.vim/doc" in output
    assert output.index("~/missing") < output.index("~/.vim/doc")


def test_config_edit_uses_editor(monkeypatch):
    captured = {}

    def fake_run(command, check):
        captured["command"] = command
        captured["check"] = check

    monkeypatch.setenv("EDITOR", "nvim")
    monkeypatch.setattr(cli.subprocess, "run", fake_run)

    result = CliRunner().invoke(app, ["config", "--edit"])

    assert result.exit_code == 0
    assert captured["command"][0] == "nvim"
    assert captured["command"][1].endswith("config.json")
    assert captured["check"] is True


def test_complete_doc_names_filters_by_prefix(temp_home):
    _make_doc(temp_home, ".vim", "doc", "fugitive.txt")
    _make_doc(temp_home, ".vim", "doc", "surround.txt")

    assert cli._complete_doc_names("fu") == [("fugitive.txt", "(cache updated)")]
    assert cli._complete_doc_names("fu") == [("fugitive.txt", "")]
    assert [name for name, _ in cli._complete_doc_names("")] == ["fugitive.txt", "surround.txt"]


def test_complete_doc_names_includes_directory_when_verbose(temp_home):
    _make_doc(temp_home, ".vim", "doc", "fugitive.txt")
    CliRunner().invoke(app, ["config", "--set-verbose", "yes"])

    assert cli._complete_doc_names("fu") == [("fugitive.txt", "~/.vim/doc (cache updated)")]
    assert cli._complete_doc_names("fu") == [("fugitive.txt", "~/.vim/doc")]


def test_complete_doc_names_keeps_colons_in_names(temp_home):
    _make_doc(temp_home, ".vim", "doc", "ft:python.txt")
    CliRunner().invoke(app, ["config", "--set-verbose", "yes"])
    cli._complete_doc_names("")

    assert cli._complete_doc_names("ft:") == [("ft:python.txt", "~/.vim/doc")]


def test_group_shell_complete_offers_help_files(monkeypatch):
    monkeypatch.setattr(cli, "_complete_doc_names", lambda incomplete: [("fugitive.txt", "")])
    command = typer.main.get_command(app)
    ctx = click.Context(command)

    values = [item.value for item in command.shell_complete(ctx, "f")]
    assert "fugitive.txt" in values

    values = [item.value for item in command.shell_complete(ctx, "-")]
    assert "fugitive.txt" not in values
