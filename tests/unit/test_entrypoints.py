from __future__ import annotations

from typer.testing import CliRunner

import vimman
from vimman.cli import app


def test_get_version_matches_dunder():
    assert vimman.get_version() == vimman.__version__


def test_module_main_calls_run(monkeypatch):
    import vimman.__main__ as main_mod

    called = {"ok": False}

    def fake_run():
        called["ok"] = True

    monkeypatch.setattr(main_mod, "run", fake_run)
    main_mod.main()
    assert called["ok"] is True


def test_cli_version_flag_prints_version():
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"vimman v{vimman.__version__}" in result.stdout


def test_run_passes_explicit_argv(monkeypatch):
    import vimman.cli as cli_mod

    captured = {}

    def fake_app(*args, **kwargs):
        captured["kwargs"] = kwargs

    monkeypatch.setattr(cli_mod, "app", fake_app)
    cli_mod.run(["list", "--verbose"])
    assert captured["kwargs"] == {"args": ["list", "--verbose"]}
