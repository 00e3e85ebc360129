import json
import sys

from shipkit.launchgen import generator
from shipkit.launchgen.generator import LaunchGenerator


def _write(path, text=""):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def _json(path, data):
    _write(path, json.dumps(data))


def _launch(root):
    return json.loads((root / ".vscode" / "launch.json").read_text(encoding="utf-8"))


def _by_name(launch):
    return {entry["name"]: entry for entry in launch["configurations"]}


def _single_project(root):
    (root / ".vscode").mkdir(parents=True)
    _json(root / "project.json", {"name": "demo", "version": "0.1.0", "exports": "cli.py"})
    _write(root / "cli.py", "def main():\n    pass\n\n\nif __name__ == \"__main__\":\n    main()\n")
    _write(root / "tests" / "test_cli.py")
    _write(root / "tools" / "run_sync.py")
    _write(root / "tools" / "helper.py")
    return root


def test_single_project_generation(tmp_path):
    root = _single_project(tmp_path)
    LaunchGenerator(root).run()
    entries = _by_name(_launch(root))
    assert set(entries) == {"tests/test_cli.py", "tools/run_sync.py", "cli", "cli --help"}

    test_entry = entries["tests/test_cli.py"]
    assert test_entry["type"] == "debugpy"
    assert test_entry["request"] == "launch"
    assert test_entry["module"] == "pytest"
    assert test_entry["args"] == ["${workspaceFolder}/tests/test_cli.py"]
    assert test_entry["python"] == sys.executable
    assert test_entry["port"] == 5678
    assert test_entry["console"] == "internalConsole"
    assert test_entry["cwd"] == "${workspaceFolder}"
    assert test_entry["env"] == {"LAUNCHGEN": "true"}
    assert "presentation" not in test_entry

    assert entries["tools/run_sync.py"]["program"] == "${workspaceFolder}/tools/run_sync.py"
    assert entries["cli --help"]["program"] == "${workspaceFolder}/cli.py"
    assert entries["cli --help"]["args"] == ["--help"]
    assert entries["cli"]["args"] == []


def test_regeneration_is_stable(tmp_path):
    root = _single_project(tmp_path)
    LaunchGenerator(root).run()
    first = _launch(root)
    LaunchGenerator(root).run()
    assert _launch(root) == first


def test_manual_entries_survive_and_stale_ones_go(tmp_path):
    root = _single_project(tmp_path)
    _json(
        root / ".vscode" / "launch.json",
        {
            "version": "0.2.0",
            "configurations": [
                {"name": "Attach", "type": "debugpy", "request": "attach"},
                {"name": "old/test_gone.py", "type": "debugpy", "env": {"LAUNCHGEN": "true"}},
            ],
        },
    )
    LaunchGenerator(root).run()
    names = [entry["name"] for entry in _launch(root)["configurations"]]
    assert names[0] == "Attach"
    assert "old/test_gone.py" not in names
    assert "tests/test_cli.py" in names


def test_monorepo_members_are_prefixed_and_grouped(tmp_path):
    root = tmp_path
    (root / ".vscode").mkdir()
    _json(root / "project.json", {"name": "mono", "workspace": ["packages/*"]})
    _json(root / "packages" / "core" / "project.json", {"name": "core", "version": "1.0.0"})
    _write(root / "packages" / "core" / "tests" / "test_core.py")
    _json(root / "packages" / "api" / "project.json", {"name": "api", "version": "0.3.0"})
    _write(root / "packages" / "api" / "run_server.py")

    LaunchGenerator(root).run()
    entries = _by_name(_launch(root))
    assert set(entries) == {"api: run_server.py", "core: tests/test_core.py"}
    core = entries["core: tests/test_core.py"]
    assert core["args"] == ["${workspaceFolder}/packages/core/tests/test_core.py"]
    assert core["presentation"] == {"group": "core"}
    assert core["port"] == 5678
    assert entries["api: run_server.py"]["program"] == "${workspaceFolder}/packages/api/run_server.py"
    assert (root / "packages" / "core" / "launch.config.json").is_file()
    assert (root / "launch.config.json").is_file()


def test_member_overrides_root_settings(tmp_path):
    root = tmp_path
    (root / ".vscode").mkdir()
    _json(root / "project.json", {"workspace": ["packages/*"]})
    _json(root / "launch.config.json", {"launch": {"port": 6000, "console": "integratedTerminal", "groups": []}})
    member = root / "packages" / "core"
    _json(member / "project.json", {"name": "core", "version": "1.0.0"})
    _json(member / "launch.config.json", {"launch": {"port": 6001, "groups": [{"id": "run", "includes": ["*.py"]}]}})
    _write(member / "main.py")

    LaunchGenerator(root).run()
    entry = _by_name(_launch(root))["core: main.py"]
    assert entry["port"] == 6001
    assert entry["console"] == "integratedTerminal"
    assert "python" not in entry


def test_program_group_with_script_variants(tmp_path):
    root = tmp_path
    (root / ".vscode").mkdir()
    _json(
        root / "launch.config.json",
        {
            "launch": {
                "port": 6000,
                "groups": [
                    {
                        "id": "serve",
                        "name": "Serve",
                        "program": "app/serve.py",
                        "scriptArgs": "--host 0.0.0.0",
                        "runtimeArgs": ["-X", "dev"],
                        "scripts": ["--reload", ["--workers", "2"]],
                    }
                ],
            }
        },
    )
    LaunchGenerator(root).run()
    entries = _by_name(_launch(root))
    assert set(entries) == {"Serve --reload", "Serve --workers 2"}
    reload_entry = entries["Serve --reload"]
    assert reload_entry["program"] == "${workspaceFolder}/app/serve.py"
    assert reload_entry["args"] == ["--host", "0.0.0.0", "--reload"]
    assert reload_entry["pythonArgs"] == ["-X", "dev"]
    assert reload_entry["port"] == 6000
    assert entries["Serve --workers 2"]["args"] == ["--host", "0.0.0.0", "--workers", "2"]


def test_dry_run_writes_nothing(tmp_path, capsys):
    root = _single_project(tmp_path)
    launch = LaunchGenerator(root, dry_run=True).run()
    assert launch["configurations"]
    assert not (root / ".vscode" / "launch.json").exists()
    assert not (root / "launch.config.json").exists()
    assert "[dry-run] Would update" in capsys.readouterr().out


def test_main_with_explicit_root(tmp_path):
    root = _single_project(tmp_path / "demo")
    assert generator.main(["--root", str(root)]) == 0
    assert (root / ".vscode" / "launch.json").is_file()


def test_main_finds_root_from_subdirectory(tmp_path, monkeypatch):
    root = _single_project(tmp_path / "demo")
    monkeypatch.chdir(root / "tools")
    assert generator.main([]) == 0
    assert (root / ".vscode" / "launch.json").is_file()


def test_main_without_root_reports_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert generator.main(["--levels", "1"]) == 1
    assert "Project root not found" in capsys.readouterr().out


def test_main_rejects_invalid_config(tmp_path, capsys):
    root = _single_project(tmp_path / "demo")
    _json(root / "launch.config.json", {"launch": {"port": "not-a-port"}})
    assert generator.main(["--root", str(root)]) == 1
    assert "[error] Invalid launch configuration" in capsys.readouterr().out
