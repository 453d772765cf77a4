"""CLI interface for sampling generated values."""

from __future__ import annotations

import json
import re
from typing import Any, Optional

import click

from .config import Config
from .errors import ConfigurationError, GenCheckError
from .gen import sample
from .logging import setup_logging
from .registry import default_registry
from .seed import Seed, new_seed

NoneType = type(None)

SCALARS: dict[str, Any] = {
    "int": int,
    "bool": bool,
    "str": str,
    "float": float,
    "bytes": bytes,
    "None": NoneType,
}

GENERICS: dict[str, Any] = {
    "list": list,
    "tuple": tuple,
    "dict": dict,
    "set": set,
    "frozenset": frozenset,
    "Optional": Optional,
}

_TOKEN = re.compile(r"\s*(\.\.\.|[A-Za-z_]\w*|[\[\],])")


def _tokenize(expr: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    expr = expr.rstrip()
    while pos < len(expr):
        match = _TOKEN.match(expr, pos)
        if match is None:
            raise ConfigurationError(f"unexpected character in type expression at {pos}: {expr[pos:]!r}")
        tokens.append(match.group(1))
        pos = match.end()
    return tokens


def parse_type(expr: str) -> Any:
    """Parse a type expression such as ``tuple[bool, list[int]]`` into a type."""
    tokens = _tokenize(expr)
    if not tokens:
        raise ConfigurationError("empty type expression")
    tp, pos = _parse(tokens, 0)
    if pos != len(tokens):
        raise ConfigurationError(f"unexpected {tokens[pos]!r} in type expression {expr!r}")
    return tp


def _parse(tokens: list[str], pos: int) -> tuple[Any, int]:
    name = tokens[pos]
    pos += 1
    if name in SCALARS:
        return SCALARS[name], pos
    if name not in GENERICS:
        raise ConfigurationError(f"unknown type name {name!r}")
    if pos >= len(tokens) or tokens[pos] != "[":
        raise ConfigurationError(f"{name} needs type arguments, e.g. {name}[int]")

    args: list[Any] = []
    pos += 1
    while True:
        if pos >= len(tokens):
            raise ConfigurationError(f"unterminated type arguments for {name}")
        if tokens[pos] == "...":
            args.append(Ellipsis)
            pos += 1
        else:
            arg, pos = _parse(tokens, pos)
            args.append(arg)
        if pos >= len(tokens):
            raise ConfigurationError(f"unterminated type arguments for {name}")
        if tokens[pos] == "]":
            pos += 1
            break
        if tokens[pos] != ",":
            raise ConfigurationError(f"expected ',' or ']' after argument of {name}, got {tokens[pos]!r}")
        pos += 1

    origin = GENERICS[name]
    try:
        return origin[args[0] if len(args) == 1 else tuple(args)], pos
    except TypeError as exc:
        raise ConfigurationError(f"invalid arguments for {name}: {exc}") from exc


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if isinstance(value, bytes):
        return value.hex()
    return repr(value)


@click.group()
@click.option("--log-format", type=click.Choice(["json", "text"]), default=None, help="Override GENCHECK_LOG_FORMAT.")
@click.pass_context
def main(ctx: click.Context, log_format: str | None):
    """gencheck random value generator."""
    try:
        config = Config.from_env()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(log_format or config.log_format, config.log_level)
    ctx.obj = config


@main.command("sample")
@click.argument("type_expr")
@click.option("--size", "max_size", type=int, help="Maximum size (default: GENCHECK_MAX_SIZE).")
@click.option("--seed", type=int, help="Seed for deterministic output.")
@click.option("--count", "-n", type=int, default=10, show_default=True, help="Number of values.")
@click.option("--json", "as_json", is_flag=True, help="Print values as JSON, one per line.")
@click.pass_obj
def sample_command(
    config: Config,
    type_expr: str,
    max_size: int | None,
    seed: int | None,
    count: int,
    as_json: bool,
):
    """Print COUNT random values of TYPE_EXPR, e.g. 'tuple[bool, list[int]]'."""
    try:
        tp = parse_type(type_expr)
        spec = default_registry().resolve(tp)
        start = Seed.of(seed) if seed is not None else new_seed()
        values = sample(spec.generator, count, config.max_size if max_size is None else max_size, start)
    except GenCheckError as exc:
        raise click.ClickException(str(exc)) from exc

    for value in values:
        if as_json:
            click.echo(json.dumps(value, default=_json_default, ensure_ascii=False))
        else:
            click.echo(repr(value))


@main.command("types")
def list_types():
    """List registered types and generic families."""
    registry = default_registry()
    click.echo("Types:")
    for tp in sorted(registry.registered_types(), key=repr):
        click.echo(f"  {getattr(tp, '__name__', repr(tp))}")
    click.echo("Families:")
    for origin in sorted(registry.registered_families(), key=repr):
        click.echo(f"  {getattr(origin, '__name__', None) or repr(origin)}")
