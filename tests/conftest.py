"""Shared pytest fixtures for the muparse test suite."""

from __future__ import annotations

import pytest

from muparse.matcher import SyntaxMatcher

SAMPLE_CONFIG = """\
[parser]
step_limit = 5000

[arguments.msg]
type = "string"

[arguments.count]
type = "integer"
min = 1

[arguments.service]
type = "enum"
choices = ["network", "nfs", "sshd"]

[arguments.verbose]
type = "flag"

[commands.echo]
syntax = ["seq", "echo", ["arg", "msg"]]
description = "print a message"

[commands.repeat]
syntax = ["seq", "repeat", ["arg", "count"], ["arg", "msg"]]

[commands.service]
syntax = ["seq", "service", ["opt", ["seq", "-v", ["preset", "verbose", "true"]]], ["alt", "status", "start", "stop"], ["arg", "service"]]
"""


@pytest.fixture
def matcher():
    return SyntaxMatcher()


@pytest.fixture
def tmp_config(tmp_path):
    """Write a muparse.toml with a few commands into a temp dir."""
    path = tmp_path / "muparse.toml"
    path.write_text(SAMPLE_CONFIG)
    return path
