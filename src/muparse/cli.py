"""muparse command-line interface."""

from __future__ import annotations

import logging
import shlex
import tomllib
from pathlib import Path

import click

from muparse import __version__
from muparse.arguments import ArgumentBundle
from muparse.completion import CompletionInfo
from muparse.config import CONFIG_NAME, MuParseConfig, find_config, load_config
from muparse.errors import DiagnosticRenderer, MuParseError
from muparse.lexer import Lexer
from muparse.loader import build_bundle, build_command_syntax
from muparse.matcher import SyntaxMatcher
from muparse.syntax import Alternation, format_syntax


def _load(path: str) -> tuple[MuParseConfig, Alternation, ArgumentBundle]:
    """Load the config found from ``path`` and build its syntax and bundle."""
    try:
        config = load_config(find_config(Path(path)))
    except FileNotFoundError:
        click.echo(f"error: no {CONFIG_NAME} found", err=True)
        raise SystemExit(1)
    except tomllib.TOMLDecodeError as e:
        click.echo(f"error: invalid {CONFIG_NAME}: {e}", err=True)
        raise SystemExit(1)
    except MuParseError as e:
        click.echo(DiagnosticRenderer(color=True).render(e.diagnostic()), err=True)
        raise SystemExit(1)
    if not config.commands:
        click.echo(f"error: no commands defined in {CONFIG_NAME}", err=True)
        raise SystemExit(1)
    try:
        root = build_command_syntax(config.command_syntax())
        bundle = build_bundle(config.arguments)
    except MuParseError as e:
        click.echo(DiagnosticRenderer(color=True).render(e.diagnostic()), err=True)
        raise SystemExit(1)
    return config, root, bundle


def _fail(error: MuParseError, line: str) -> None:
    renderer = DiagnosticRenderer(color=True)
    click.echo(renderer.render(error.diagnostic(), line), err=True)
    raise SystemExit(1)


@click.group()
@click.version_option(__version__, prog_name="muparse")
@click.option("-v", "--verbose", is_flag=True, help="Trace the matcher on stderr.")
def main(verbose: bool) -> None:
    """Check and complete command lines against a declared syntax."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


_config_option = click.option(
    "--config", "config_path", default=".", type=click.Path(exists=True),
    help=f"A {CONFIG_NAME} file, or a directory to search upwards from.",
)
_step_limit_option = click.option(
    "--step-limit", type=int, default=None,
    help="Override the parser step limit (0 or less: unlimited).",
)


@main.command()
@click.argument("words", nargs=-1, required=True)
@_config_option
@_step_limit_option
def parse(words: tuple[str, ...], config_path: str, step_limit: int | None) -> None:
    """Parse a command line and print the bound arguments.

    WORDS is either the whole line as one string or the line already split
    into words by the shell.
    """
    config, root, bundle = _load(config_path)
    # Several words are shell-quoted back into one line; a single one is the line
    line = words[0] if len(words) == 1 else shlex.join(words)
    limit = config.parser.step_limit if step_limit is None else step_limit

    try:
        source = Lexer(line).source()
        SyntaxMatcher().parse(root, None, source, bundle, limit)
    except MuParseError as e:
        _fail(e, line)

    for label, value in bundle.values().items():
        click.echo(f"{label} = {value!r}")


@main.command()
@click.argument("line")
@_config_option
@_step_limit_option
def complete(line: str, config_path: str, step_limit: int | None) -> None:
    """List the completions for a partial command line.

    The first line printed is the offset the completions replace from.
    """
    config, root, bundle = _load(config_path)
    limit = config.parser.step_limit if step_limit is None else step_limit

    completion = CompletionInfo()
    try:
        source = Lexer(line, lenient=True).source()
        SyntaxMatcher().parse(root, completion, source, bundle, limit)
    except MuParseError as e:
        _fail(e, line)

    start = completion.completion_start
    click.echo(start if start >= 0 else len(line))
    for candidate in completion.completions:
        click.echo(candidate)


@main.command()
@_config_option
def show(config_path: str) -> None:
    """Print the syntax of every configured command."""
    config, root, _bundle = _load(config_path)
    for cmd, syntax in zip(config.commands, root.alternatives):
        click.echo(f"{cmd.name}: {format_syntax(syntax)}")
        if cmd.description:
            click.echo(f"    {cmd.description}")
