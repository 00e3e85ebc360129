import json
import sys

from shipkit.launchgen.config_loader import DEFAULT_EXCLUDES, LAUNCH_CONFIG_FILE, ConfigLoader


def _manifest(directory, **data):
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "project.json").write_text(json.dumps(data), encoding="utf-8")


def _saved(directory):
    return json.loads((directory / LAUNCH_CONFIG_FILE).read_text(encoding="utf-8"))


def test_root_defaults_are_generated_and_saved(tmp_path):
    _manifest(tmp_path, name="demo", version="0.1.0")
    config = ConfigLoader().load_and_merge(tmp_path, is_project_root=True)
    assert config.port == 5678
    assert config.console == "internalConsole"
    assert config.runtime_executable == sys.executable
    assert config.excludes == list(DEFAULT_EXCLUDES)
    assert [group.id for group in config.groups] == ["test", "run"]
    saved = _saved(tmp_path)["launch"]
    assert saved["port"] == 5678
    assert saved["groups"][0]["module"] == "pytest"


def test_member_defaults_only_carry_groups(tmp_path):
    _manifest(tmp_path, name="core", version="1.0.0")
    ConfigLoader().load_and_merge(tmp_path)
    saved = _saved(tmp_path)["launch"]
    assert set(saved) == {"groups"}


def test_existing_config_is_not_regenerated(tmp_path):
    (tmp_path / LAUNCH_CONFIG_FILE).write_text(
        json.dumps({"launch": {"port": 7000, "groups": [{"id": "run", "includes": ["scripts/*.py"]}]}}),
        encoding="utf-8",
    )
    config = ConfigLoader().load_and_merge(tmp_path, is_project_root=True)
    assert config.port == 7000
    assert [group.id for group in config.groups] == ["run"]
    assert _saved(tmp_path)["launch"]["port"] == 7000


def test_force_regenerate_overwrites(tmp_path):
    (tmp_path / LAUNCH_CONFIG_FILE).write_text(json.dumps({"launch": {"port": 7000}}), encoding="utf-8")
    config = ConfigLoader(force_regenerate=True).load_and_merge(tmp_path, is_project_root=True)
    assert config.port == 5678
    assert _saved(tmp_path)["launch"]["port"] == 5678


def test_dry_run_does_not_write(tmp_path, capsys):
    config = ConfigLoader(dry_run=True).load_and_merge(tmp_path, is_project_root=True)
    assert config.groups
    assert not (tmp_path / LAUNCH_CONFIG_FILE).exists()
    assert "[plan] Would write" in capsys.readouterr().out


def test_manifest_launch_property_then_file(tmp_path):
    _manifest(tmp_path, name="demo", launch={"port": 6000, "console": "externalTerminal"})
    (tmp_path / LAUNCH_CONFIG_FILE).write_text(json.dumps({"launch": {"port": 6100}}), encoding="utf-8")
    config = ConfigLoader().load_and_merge(tmp_path)
    assert config.port == 6100
    assert config.console == "externalTerminal"


def test_manifest_launch_property_alone_skips_generation(tmp_path):
    _manifest(tmp_path, name="demo", launch={"groups": []})
    config = ConfigLoader().load_and_merge(tmp_path)
    assert config.groups == []
    assert not (tmp_path / LAUNCH_CONFIG_FILE).exists()


def test_default_port_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("LAUNCHGEN_DEFAULT_PORT", "9229")
    config = ConfigLoader().load_and_merge(tmp_path, is_project_root=True)
    assert config.port == 9229


def test_executable_exports_become_program_groups(tmp_path):
    _manifest(tmp_path, name="demo", exports={"serve": "serve.py", "lib": "lib/__init__.py", "util": "util.py"})
    (tmp_path / "serve.py").write_text("if __name__ == \"__main__\":\n    pass\n", encoding="utf-8")
    (tmp_path / "util.py").write_text("VALUE = 1\n", encoding="utf-8")
    config = ConfigLoader().load_and_merge(tmp_path)
    exports = [group for group in config.groups if group.program]
    assert [group.id for group in exports] == ["serve"]
    assert exports[0].scripts == ["", "--help"]


def test_second_load_leaves_generated_file_untouched(tmp_path):
    _manifest(tmp_path, name="demo", version="0.1.0")
    loader = ConfigLoader()
    first = loader.load_and_merge(tmp_path, is_project_root=True)
    written = (tmp_path / LAUNCH_CONFIG_FILE).read_bytes()
    mtime = (tmp_path / LAUNCH_CONFIG_FILE).stat().st_mtime_ns
    second = loader.load_and_merge(tmp_path, is_project_root=True)
    assert second == first
    assert (tmp_path / LAUNCH_CONFIG_FILE).read_bytes() == written
    assert (tmp_path / LAUNCH_CONFIG_FILE).stat().st_mtime_ns == mtime
