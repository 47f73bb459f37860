"""TOML config loading for muparse.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from muparse.errors import ConfigError
from muparse.matcher import DEFAULT_STEP_LIMIT

CONFIG_NAME = "muparse.toml"


@dataclass
class ParserConfig:
    step_limit: int = DEFAULT_STEP_LIMIT


@dataclass
class CommandConfig:
    name: str
    syntax: Any
    description: str = ""


@dataclass
class MuParseConfig:
    parser: ParserConfig = field(default_factory=ParserConfig)
    arguments: dict[str, dict[str, Any]] = field(default_factory=dict)
    commands: list[CommandConfig] = field(default_factory=list)

    def command_syntax(self) -> dict[str, Any]:
        """Syntax descriptions keyed by command name, in file order."""
        return {cmd.name: cmd.syntax for cmd in self.commands}


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find muparse.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        return path
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> MuParseConfig:
    """Parse a muparse.toml file into a MuParseConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = MuParseConfig()

    if "parser" in data:
        prs = data["parser"]
        step_limit = prs.get("step_limit", DEFAULT_STEP_LIMIT)
        if isinstance(step_limit, bool) or not isinstance(step_limit, int):
            raise ConfigError(f"parser.step_limit must be an integer, got {step_limit!r}")
        config.parser = ParserConfig(step_limit=step_limit)

    if "arguments" in data:
        config.arguments = {
            label: dict(spec) for label, spec in data["arguments"].items()
        }

    if "commands" in data:
        for name, cmd in data["commands"].items():
            config.commands.append(
                CommandConfig(
                    name=name,
                    syntax=cmd.get("syntax", name),
                    description=cmd.get("description", ""),
                )
            )

    return config
