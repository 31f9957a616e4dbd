from __future__ import annotations

GROUP_SUBCOMMANDS: dict[str, set[str]] = {
    "users": {"lookup", "by-id", "by-ids", "by-username", "by-usernames", "search"},
    "posts": {"lookup", "by-id", "by-ids", "search"},
    "trends": {"lookup", "by-woeid", "search"},
}

GLOBAL_VALUE_OPTIONS = {"--bearer-token", "--timeout", "--retries"}

COMMAND_VALUE_OPTIONS = {
    "--preset",
    "--user-fields",
    "--tweet-fields",
    "--expansions",
    "--media-fields",
    "--poll-fields",
    "--place-fields",
    "--trend-fields",
    "--query",
    "--max-results",
    "--next-token",
    "--pagination-token",
    "--start-time",
    "--end-time",
    "--since-id",
    "--until-id",
    "--sort-order",
    "--max-trends",
    "--limit",
    "--media-dir",
}

_HELP_FLAGS = {"--help", "-h"}


def _first_positional(args: list[str], start: int, value_options: set[str]) -> int:
    index = start
    while index < len(args):
        arg = args[index]
        if arg == "--":
            return index + 1 if index + 1 < len(args) else -1
        if arg in value_options:
            index += 2
            continue
        if arg.startswith("-") and arg != "-":
            index += 1
            continue
        return index
    return -1


def resolve_cli_invocation(raw_args: list[str]) -> dict:
    """Insert the hidden ``lookup`` sub-command for ``xcli users <inputs...>`` style calls."""
    if not raw_args:
        return {"argv": None, "show_help": True}

    group_index = _first_positional(raw_args, 0, GLOBAL_VALUE_OPTIONS)
    if group_index < 0 or raw_args[group_index] not in GROUP_SUBCOMMANDS:
        return {"argv": None, "show_help": False}

    group = raw_args[group_index]
    rest = raw_args[group_index + 1 :]
    target = _first_positional(rest, 0, COMMAND_VALUE_OPTIONS)
    if target < 0:
        # Only options after the group: leave help and bare invocations to click.
        if not rest or any(arg in _HELP_FLAGS for arg in rest):
            return {"argv": None, "show_help": False}
    elif rest[target] in GROUP_SUBCOMMANDS[group]:
        return {"argv": None, "show_help": False}

    rewritten = raw_args[:]
    rewritten.insert(group_index + 1, "lookup")
    return {"argv": rewritten, "show_help": False}
