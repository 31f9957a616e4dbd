from __future__ import annotations

import sys

from typer.main import get_command

from .cli import app
from .cli_args import resolve_cli_invocation


def build_argv(raw_args: list[str]) -> list[str]:
    """Final click argv for ``xcli``: a leading ``--`` is dropped and bare inputs get ``lookup``."""
    args = raw_args[1:] if raw_args[:1] == ["--"] else raw_args
    invocation = resolve_cli_invocation(args)
    if invocation["show_help"]:
        return ["--help"]
    return invocation["argv"] or args


def main() -> None:
    get_command(app).main(args=build_argv(sys.argv[1:]), prog_name="xcli")


if __name__ == "__main__":
    main()
