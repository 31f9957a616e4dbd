from xcli.cli_args import resolve_cli_invocation


def test_no_args_shows_help():
    assert resolve_cli_invocation([]) == {"argv": None, "show_help": True}


def test_inserts_lookup_for_bare_inputs():
    result = resolve_cli_invocation(["users", "@jack", "12"])
    assert result["argv"] == ["users", "lookup", "@jack", "12"]


def test_skips_global_options_with_values():
    result = resolve_cli_invocation(["--timeout", "500", "posts", "--preset", "minimal", "1"])
    assert result["argv"] == ["--timeout", "500", "posts", "lookup", "--preset", "minimal", "1"]


def test_known_subcommands_are_untouched():
    assert resolve_cli_invocation(["users", "search", "x"])["argv"] is None
    assert resolve_cli_invocation(["trends", "by-woeid", "1"])["argv"] is None
    assert resolve_cli_invocation(["fields", "users"])["argv"] is None


def test_help_and_bare_group_are_untouched():
    assert resolve_cli_invocation(["users"])["argv"] is None
    assert resolve_cli_invocation(["users", "--help"])["argv"] is None


def test_location_words_go_to_lookup():
    assert resolve_cli_invocation(["trends", "new", "york"])["argv"] == ["trends", "lookup", "new", "york"]
