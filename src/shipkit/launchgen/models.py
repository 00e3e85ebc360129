from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Console = Literal["internalConsole", "integratedTerminal", "externalTerminal"]

LAUNCH_JSON_VERSION = "0.2.0"
GENERATED_MARKER = "LAUNCHGEN"
WORKSPACE_FOLDER = "${workspaceFolder}"


class _LaunchModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Group(_LaunchModel):
    """A set of launch entries: file discovery via ``includes`` or a single ``program``.

    Only ``id`` is required so that a partial group can overlay an inherited one.
    """

    id: str = Field(min_length=1)
    name: str | None = None
    includes: list[str] | None = None
    excludes: list[str] | None = None
    program: str | None = None
    module: str | None = None
    runtime_executable: str | None = Field(default=None, alias="runtimeExecutable")
    runtime_args: list[str] | None = Field(default=None, alias="runtimeArgs")
    script_args: str | list[str] | None = Field(default=None, alias="scriptArgs")
    scripts: list[str | list[str]] | None = None
    port: int | None = Field(default=None, ge=0, le=65535)
    console: Console | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


class LaunchConfig(_LaunchModel):
    schema_url: str | None = Field(default=None, alias="$schema")
    port: int | None = Field(default=None, ge=0, le=65535)
    console: Console | None = None
    runtime_executable: str | None = Field(default=None, alias="runtimeExecutable")
    excludes: list[str] | None = None
    groups: list[Group] | None = None


class LaunchConfiguration(_LaunchModel):
    """One generated debugpy entry of ``.vscode/launch.json``."""

    type: str = "debugpy"
    request: Literal["launch"] = "launch"
    name: str
    program: str | None = None
    module: str | None = None
    cwd: str = WORKSPACE_FOLDER
    python: str | None = None
    python_args: list[str] = Field(default_factory=list, alias="pythonArgs")
    args: list[str] | None = None
    port: int | None = None
    console: Console | None = None
    presentation: dict[str, str] | None = None
    env: dict[str, str] = Field(default_factory=lambda: {GENERATED_MARKER: "true"})


def is_generated(entry: dict[str, Any]) -> bool:
    env = entry.get("env")
    return isinstance(env, dict) and str(env.get(GENERATED_MARKER, "")).lower() == "true"


def empty_launch_json() -> dict[str, Any]:
    return {"version": LAUNCH_JSON_VERSION, "configurations": []}
