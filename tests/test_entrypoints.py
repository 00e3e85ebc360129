import pytest

from shipkit.launchgen.entrypoints import export_display_name, export_entries, is_executable_entry


def test_export_entries_string_and_mapping():
    assert export_entries("cli.py") == [(".", "cli.py")]
    assert export_entries({"serve": "app/serve.py", "bad": 3}) == [("serve", "app/serve.py")]
    assert export_entries(None) == []


@pytest.mark.parametrize(
    "name,text,expected",
    [
        ("tool.py", "#!/usr/bin/env python3\nprint('hi')\n", True),
        ("tool.py", "def main():\n    pass\n\nif __name__ == '__main__':\n    main()\n", True),
        ("helpers.py", "def helper():\n    return 1\n", False),
        ("__init__.py", "#!/usr/bin/env python3\n", False),
        ("__main__.py", "", True),
    ],
)
def test_is_executable_entry(tmp_path, name, text, expected):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    assert is_executable_entry(path) is expected


@pytest.mark.parametrize("name", ["gone.py", "main.py", "__main__.py"])
def test_missing_file_is_not_executable(tmp_path, name):
    assert not is_executable_entry(tmp_path / name)


def test_export_display_name():
    assert export_display_name(".", "src/tool.py") == "src/tool"
    assert export_display_name("serve", "app/serve.py") == "serve"
