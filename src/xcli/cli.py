from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
import json
import logging
import os
import shutil
import sys
from typing import Any, Iterable, Iterator, List, Mapping

import click
import typer
from typer.main import get_command

from .config import XcliConfig, get_bearer_token, load_config, resolve_retries, resolve_timeout_ms
from .errors import ApiError, ConfigError
from .extract import dedupe, is_numeric_id, parse_csv, strip_at_prefix
from .human import (
    render_api_error,
    render_download_report,
    render_posts,
    render_raw,
    render_trends,
    render_users,
    render_woeid_matches,
)
from .media import DEFAULT_MEDIA_DIR, collect_post_media, download_post_media_assets
from .options import (
    RequestFields,
    parse_bounded_int,
    parse_search_query,
    parse_woeid_argument,
    posts_lookup_fields,
    posts_search_options,
    users_lookup_fields,
    users_search_options,
)
from .output import OutputConfig, OutputMode, resolve_output_config_from_options, resolve_output_mode, status_prefix
from .references import classify_post_reference, require_at_most, resolve_post_references, resolve_user_references
from .responses import merge_lookup_responses
from .styles import style_text
from .version import get_cli_version
from .woeid import FileWoeidCache, WoeidRecord, load_woeid_index, resolve_default_cache_path, resolve_woeid, search_woeid
from .x_client import RawResponse, XClient

log = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True, help="xcli - CLI for X API v2 (read-only)")
users_app = typer.Typer(no_args_is_help=True, help="Lookup users + user search")
posts_app = typer.Typer(no_args_is_help=True, help="Lookup posts + post search")
trends_app = typer.Typer(no_args_is_help=True, help="Lookup trends by WOEID or location")
app.add_typer(users_app, name="users")
app.add_typer(posts_app, name="posts")
app.add_typer(trends_app, name="trends")

NO_MEDIA_HINT = (
    "No downloadable attachment media URLs found. Include --expansions attachments.media_keys "
    "and --media-fields media_key,type,url,preview_image_url."
)

FIELD_REFERENCES = {
    "users": [
        "User fields",
        "",
        "Docs:",
        "  https://docs.x.com/x-api/fundamentals/fields",
        "  https://docs.x.com/x-api/fundamentals/data-dictionary#user",
        "",
        "Common user.fields values (not exhaustive):",
        "  id,name,username,created_at,description,location,profile_image_url,protected,"
        "public_metrics,url,verified,pinned_tweet_id",
        "",
        "Notes:",
        "  - X API v2 returns minimal fields by default.",
        "  - To include related objects use expansions, then request fields for those objects.",
    ],
    "posts": [
        "Post (tweet) fields",
        "",
        "Docs:",
        "  https://docs.x.com/x-api/fundamentals/fields",
        "  https://docs.x.com/x-api/fundamentals/data-dictionary#tweet",
        "",
        "Common tweet.fields values (not exhaustive):",
        "  id,text,created_at,author_id,conversation_id,in_reply_to_user_id,lang,public_metrics,"
        "possibly_sensitive,referenced_tweets,entities,attachments",
        "",
        "Common expansions (not exhaustive):",
        "  author_id,attachments.media_keys,referenced_tweets.id",
        "",
        "Related object field params:",
        "  user.fields, media.fields, poll.fields, place.fields",
    ],
    "trends": [
        "Trend fields",
        "",
        "Docs:",
        "  https://docs.x.com/x-api/trends/get-trends-by-woeid",
        "",
        "Common trend.fields values:",
        "  trend_name,tweet_count",
    ],
}


@dataclass
class CliContext:
    is_tty: bool
    output: OutputConfig
    config: XcliConfig
    opts: dict
    env: Mapping[str, str]
    ctx: typer.Context | None = None

    def p(self, kind: str) -> str:
        prefix = status_prefix(kind, self.output)
        if self.output.plain or not self.output.color:
            return prefix
        color = {"ok": "green", "warn": "yellow", "err": "red", "info": "cyan"}.get(kind, "gray")
        return style_text(prefix, color=color, enabled=self.output.color)

    @property
    def max_width(self) -> int | None:
        if not self.is_tty:
            return None
        return shutil.get_terminal_size().columns

    def error(self, message: str) -> None:
        typer.echo(f"{self.p('err')}{message}", err=True)

    def emit(self, lines: Iterable[str], *, err: bool = False) -> None:
        for line in lines:
            typer.echo(line, err=err)

    def client(self) -> XClient:
        token = get_bearer_token(self.opts.get("bearer_token"), self.env)
        client = XClient(
            token,
            timeout_ms=resolve_timeout_ms(self.opts.get("timeout"), self.config, self.env),
            max_retries=resolve_retries(self.opts.get("retries"), self.config, self.env),
        )
        if self.ctx is not None:
            self.ctx.call_on_close(client.close)
        return client

    def load_woeid_index(self) -> list[WoeidRecord]:
        cache = FileWoeidCache(resolve_default_cache_path(self.config.woeidCachePath))
        return load_woeid_index(cache)

    def print_json(self, value: Any, mode: OutputMode, *, err: bool = False) -> None:
        indent = 2 if mode == "json-pretty" else None
        typer.echo(json.dumps(value, indent=indent, ensure_ascii=False), err=err)

    def print_data(self, data: Any, mode: OutputMode, topic: str) -> None:
        if mode != "human":
            self.print_json(data, mode)
            return
        render = {"users": render_users, "posts": render_posts, "trends": render_trends}[topic]
        self.emit(render(data, self.output, max_width=self.max_width))

    def print_raw(self, payload: RawResponse, mode: OutputMode) -> None:
        if mode != "human":
            self.print_json(payload.to_dict(), mode)
            return
        self.emit(render_raw(payload, self.output))

    def print_raw_many(self, labelled: list[tuple[str, RawResponse]], mode: OutputMode) -> None:
        if len(labelled) == 1:
            self.print_raw(labelled[0][1], mode)
            return
        if mode != "human":
            self.print_json({"responses": [{"label": label, **raw.to_dict()} for label, raw in labelled]}, mode)
            return
        for label, raw in labelled:
            typer.echo(self.output.style(label, "magenta"))
            self.emit(render_raw(raw, self.output))
            typer.echo("")

    def report_invalid(self, invalid) -> None:
        for bad in invalid:
            self.error(bad.describe())
        raise typer.Exit(code=1)

    @contextmanager
    def guard(self, mode: OutputMode) -> Iterator[None]:
        try:
            yield
        except typer.Exit:
            raise
        except ConfigError as exc:
            self.error(str(exc))
            raise typer.Exit(code=1)
        except ApiError as exc:
            if mode != "human":
                self.print_json(exc.to_dict(), mode)
            else:
                self.emit(render_api_error(exc, self.output), err=True)
            raise typer.Exit(code=2)
        except Exception as exc:
            log.debug("Command failed", exc_info=True)
            self.error(str(exc) or exc.__class__.__name__)
            raise typer.Exit(code=2)


def _build_context(ctx: typer.Context) -> CliContext:
    obj = ctx.obj or {}
    is_tty = sys.stdout.isatty()
    output = resolve_output_config_from_options(obj.get("output_opts", {}), os.environ, is_tty)
    config = load_config(lambda message: typer.echo(message, err=True))
    return CliContext(
        is_tty=is_tty,
        output=output,
        config=config,
        opts=obj.get("global_opts", {}),
        env=os.environ,
        ctx=ctx,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_cli_version())
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    bearer_token: str | None = typer.Option(None, "--bearer-token", help="Override env var X_API_BEARER_TOKEN"),
    timeout: str | None = typer.Option(None, "--timeout", help="Request timeout in milliseconds"),
    retries: str | None = typer.Option(None, "--retries", help="Max retries for transient failures"),
    plain: bool = typer.Option(False, "--plain", help="Plain output (stable, no emoji, no color)"),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colors (or set NO_COLOR)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging to stderr"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit"
    ),
):
    _configure_logging(verbose)
    if ctx.obj is None:
        ctx.obj = {}
    ctx.obj["output_opts"] = {"plain": plain, "emoji": not no_emoji, "color": not no_color}
    ctx.obj["global_opts"] = {"bearer_token": bearer_token, "timeout": timeout, "retries": retries}


# users


def _users_fields(context: CliContext, preset, user_fields, expansions, tweet_fields) -> RequestFields:
    return users_lookup_fields(
        preset=preset or context.config.usersPreset,
        user_fields=user_fields,
        expansions=expansions,
        tweet_fields=tweet_fields,
    )


@users_app.command("lookup", hidden=True)
def users_lookup(
    ctx: typer.Context,
    inputs: List[str] = typer.Argument(None, help="IDs, usernames or profile/status URLs"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        resolved = resolve_user_references(inputs or [])
        if not resolved.ok:
            context.report_invalid(resolved.invalid)
        if resolved.empty:
            raise ConfigError("No valid user inputs found.")
        resolved.enforce_limits("users")

        client = context.client()
        if raw:
            labelled = []
            if resolved.ids:
                labelled.append(
                    (f"users.get_by_ids ({len(resolved.ids)})", client.users.get_by_ids(resolved.ids, fields, raw=True))
                )
            if resolved.usernames:
                labelled.append(
                    (
                        f"users.get_by_usernames ({len(resolved.usernames)})",
                        client.users.get_by_usernames(resolved.usernames, fields, raw=True),
                    )
                )
            context.print_raw_many(labelled, mode)
            return

        responses = []
        if resolved.ids:
            responses.append(client.users.get_by_ids(resolved.ids, fields))
        if resolved.usernames:
            responses.append(client.users.get_by_usernames(resolved.usernames, fields))
        context.print_data(merge_lookup_responses(responses), mode, "users")


@users_app.command("by-id")
def users_by_id(
    ctx: typer.Context,
    user_id: str | None = typer.Argument(None, metavar="ID"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        if not user_id:
            raise ConfigError("Missing required <id>.")
        client = context.client()
        if raw:
            context.print_raw(client.users.get_by_id(user_id, fields, raw=True), mode)
            return
        context.print_data(client.users.get_by_id(user_id, fields), mode, "users")


@users_app.command("by-ids")
def users_by_ids(
    ctx: typer.Context,
    user_ids: List[str] = typer.Argument(None, metavar="ID..."),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        ids = dedupe(user_ids or [])
        if not ids:
            raise ConfigError("Missing required <id...>.")
        require_at_most(ids, "users by-ids")
        client = context.client()
        if raw:
            context.print_raw(client.users.get_by_ids(ids, fields, raw=True), mode)
            return
        context.print_data(client.users.get_by_ids(ids, fields), mode, "users")


@users_app.command("by-username")
def users_by_username(
    ctx: typer.Context,
    username: str | None = typer.Argument(None, metavar="USERNAME"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        if not username:
            raise ConfigError("Missing required <username>. You can pass with or without '@'.")
        name = strip_at_prefix(username)
        client = context.client()
        if raw:
            context.print_raw(client.users.get_by_username(name, fields, raw=True), mode)
            return
        context.print_data(client.users.get_by_username(name, fields), mode, "users")


@users_app.command("by-usernames")
def users_by_usernames(
    ctx: typer.Context,
    usernames: List[str] = typer.Argument(None, metavar="USERNAME..."),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        names = dedupe([strip_at_prefix(name) for name in usernames or []])
        if not names:
            raise ConfigError("Missing required <username...>.")
        require_at_most(names, "users by-usernames")
        client = context.client()
        if raw:
            context.print_raw(client.users.get_by_usernames(names, fields, raw=True), mode)
            return
        context.print_data(client.users.get_by_usernames(names, fields), mode, "users")


@users_app.command("search")
def users_search(
    ctx: typer.Context,
    query_args: List[str] = typer.Argument(None, metavar="QUERY..."),
    query: str | None = typer.Option(None, "--query", help="Search query (alternative to positional query)"),
    max_results: str | None = typer.Option(None, "--max-results", help="Search max results (1-1000)"),
    next_token: str | None = typer.Option(None, "--next-token", help="Search pagination token"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|profile"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        text = parse_search_query(query, query_args or [])
        options = users_search_options(max_results=max_results, next_token=next_token)
        fields = _users_fields(context, preset, user_fields, expansions, tweet_fields)
        client = context.client()
        if raw:
            context.print_raw(client.users.search(text, options, fields, raw=True), mode)
            return
        context.print_data(client.users.search(text, options, fields), mode, "users")


# posts


def _posts_fields(context: CliContext, preset, tweet_fields, expansions, user_fields, media_fields, poll_fields, place_fields):
    return posts_lookup_fields(
        preset=preset or context.config.postsPreset,
        tweet_fields=tweet_fields,
        expansions=expansions,
        user_fields=user_fields,
        media_fields=media_fields,
        poll_fields=poll_fields,
        place_fields=place_fields,
    )


def _maybe_download_media(context: CliContext, data: Any, mode: OutputMode, download: bool, media_dir: str | None) -> None:
    if not download:
        return
    to_stderr = mode != "human"
    downloadable = collect_post_media(data).downloadable
    if not downloadable:
        typer.echo(NO_MEDIA_HINT if to_stderr else context.output.style(NO_MEDIA_HINT, "yellow"), err=to_stderr)
        return
    report = download_post_media_assets(downloadable, media_dir or context.config.mediaDir or DEFAULT_MEDIA_DIR)
    styled = OutputConfig(plain=True, emoji=False, color=False) if to_stderr else context.output
    context.emit(render_download_report(report, styled), err=to_stderr)


def _fetch_posts(context: CliContext, ids: list[str], fields: RequestFields, mode: OutputMode, raw: bool, download: bool, media_dir: str | None) -> None:
    client = context.client()
    if raw:
        context.print_raw(client.posts.get_by_ids(ids, fields, raw=True), mode)
        return
    data = client.posts.get_by_ids(ids, fields)
    context.print_data(data, mode, "posts")
    _maybe_download_media(context, data, mode, download, media_dir)


@posts_app.command("lookup", hidden=True)
def posts_lookup(
    ctx: typer.Context,
    inputs: List[str] = typer.Argument(None, help="Post IDs or status URLs"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|post"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    media_fields: str | None = typer.Option(None, "--media-fields", help="Maps to media.fields"),
    poll_fields: str | None = typer.Option(None, "--poll-fields", help="Maps to poll.fields"),
    place_fields: str | None = typer.Option(None, "--place-fields", help="Maps to place.fields"),
    download_media: bool = typer.Option(False, "--download-media", help="Download attached media"),
    media_dir: str | None = typer.Option(None, "--media-dir", help="Media output directory"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _posts_fields(context, preset, tweet_fields, expansions, user_fields, media_fields, poll_fields, place_fields)
        resolved = resolve_post_references(inputs or [])
        if not resolved.ok:
            context.report_invalid(resolved.invalid)
        if not resolved.ids:
            raise ConfigError("No valid post inputs found.")
        require_at_most(resolved.ids, "posts IDs")
        _fetch_posts(context, resolved.ids, fields, mode, raw, download_media, media_dir)


@posts_app.command("by-id")
def posts_by_id(
    ctx: typer.Context,
    post_input: str | None = typer.Argument(None, metavar="ID|URL"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|post"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    media_fields: str | None = typer.Option(None, "--media-fields", help="Maps to media.fields"),
    poll_fields: str | None = typer.Option(None, "--poll-fields", help="Maps to poll.fields"),
    place_fields: str | None = typer.Option(None, "--place-fields", help="Maps to place.fields"),
    download_media: bool = typer.Option(False, "--download-media", help="Download attached media"),
    media_dir: str | None = typer.Option(None, "--media-dir", help="Media output directory"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _posts_fields(context, preset, tweet_fields, expansions, user_fields, media_fields, poll_fields, place_fields)
        if not post_input:
            raise ConfigError("Missing required <id|url>.")
        parsed = classify_post_reference(post_input)
        if parsed.kind == "invalid":
            context.report_invalid([parsed])
        client = context.client()
        if raw:
            context.print_raw(client.posts.get_by_id(parsed.value, fields, raw=True), mode)
            return
        data = client.posts.get_by_id(parsed.value, fields)
        context.print_data(data, mode, "posts")
        _maybe_download_media(context, data, mode, download_media, media_dir)


@posts_app.command("by-ids")
def posts_by_ids(
    ctx: typer.Context,
    inputs: List[str] = typer.Argument(None, metavar="ID|URL..."),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|post"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    media_fields: str | None = typer.Option(None, "--media-fields", help="Maps to media.fields"),
    poll_fields: str | None = typer.Option(None, "--poll-fields", help="Maps to poll.fields"),
    place_fields: str | None = typer.Option(None, "--place-fields", help="Maps to place.fields"),
    download_media: bool = typer.Option(False, "--download-media", help="Download attached media"),
    media_dir: str | None = typer.Option(None, "--media-dir", help="Media output directory"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        fields = _posts_fields(context, preset, tweet_fields, expansions, user_fields, media_fields, poll_fields, place_fields)
        resolved = resolve_post_references(inputs or [])
        if not resolved.ok:
            context.report_invalid(resolved.invalid)
        if not resolved.ids:
            raise ConfigError("Missing required <id...>.")
        require_at_most(resolved.ids, "posts by-ids")
        _fetch_posts(context, resolved.ids, fields, mode, raw, download_media, media_dir)


@posts_app.command("search")
def posts_search(
    ctx: typer.Context,
    args: List[str] = typer.Argument(None, metavar="[recent|all] QUERY..."),
    query: str | None = typer.Option(None, "--query", help="Search query (alternative to positional query)"),
    max_results: str | None = typer.Option(None, "--max-results", help="recent: 10-100, all: 10-500"),
    next_token: str | None = typer.Option(None, "--next-token", help="Search pagination token"),
    pagination_token: str | None = typer.Option(None, "--pagination-token", help="Search pagination token"),
    start_time: str | None = typer.Option(None, "--start-time", help="Search lower time bound (ISO 8601)"),
    end_time: str | None = typer.Option(None, "--end-time", help="Search upper time bound (ISO 8601)"),
    since_id: str | None = typer.Option(None, "--since-id", help="Return posts newer than this ID"),
    until_id: str | None = typer.Option(None, "--until-id", help="Return posts older than this ID"),
    sort_order: str | None = typer.Option(None, "--sort-order", help="recency|relevancy"),
    preset: str | None = typer.Option(None, "--preset", help="Field preset: minimal|post"),
    tweet_fields: str | None = typer.Option(None, "--tweet-fields", help="Maps to tweet.fields"),
    expansions: str | None = typer.Option(None, "--expansions", help="Maps to expansions"),
    user_fields: str | None = typer.Option(None, "--user-fields", help="Maps to user.fields"),
    media_fields: str | None = typer.Option(None, "--media-fields", help="Maps to media.fields"),
    poll_fields: str | None = typer.Option(None, "--poll-fields", help="Maps to poll.fields"),
    place_fields: str | None = typer.Option(None, "--place-fields", help="Maps to place.fields"),
    download_media: bool = typer.Option(False, "--download-media", help="Download attached media"),
    media_dir: str | None = typer.Option(None, "--media-dir", help="Media output directory"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    output_mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(output_mode):
        args = list(args or [])
        search_mode = "all" if args[:1] == ["all"] else "recent"
        query_args = args[1:] if args[:1] in (["recent"], ["all"]) else args

        text = parse_search_query(query, query_args)
        options = posts_search_options(
            search_mode,
            max_results=max_results,
            next_token=next_token,
            pagination_token=pagination_token,
            start_time=start_time,
            end_time=end_time,
            since_id=since_id,
            until_id=until_id,
            sort_order=sort_order,
        )
        fields = _posts_fields(context, preset, tweet_fields, expansions, user_fields, media_fields, poll_fields, place_fields)
        client = context.client()
        search = client.posts.search_all if search_mode == "all" else client.posts.search_recent
        if raw:
            context.print_raw(search(text, options, fields, raw=True), output_mode)
            return
        data = search(text, options, fields)
        context.print_data(data, output_mode, "posts")
        _maybe_download_media(context, data, output_mode, download_media, media_dir)


# trends


def _run_trends(
    context: CliContext,
    args: list[str],
    query: str | None,
    max_trends: str | None,
    trend_fields: str | None,
    mode: OutputMode,
    raw: bool,
) -> None:
    if not args and not query:
        raise ConfigError("Missing required <woeid|location>.")

    if args and is_numeric_id(args[0]):
        woeid = parse_woeid_argument(args[0])
    else:
        text = parse_search_query(query, args)
        resolved = resolve_woeid(text, loader=context.load_woeid_index)
        woeid = resolved.woeid
        if mode == "human":
            typer.echo(context.output.style(f"Resolved '{text}' -> {woeid} ({resolved.displayName})", "dim"))
            if resolved.hadMultiple:
                typer.echo(context.output.style(f"Tip: use 'xcli trends search {text}' to inspect alternatives.", "dim"))
            typer.echo("")

    limit = parse_bounded_int(max_trends, "--max-trends", 1, 50)
    fields = RequestFields(trend_fields=parse_csv(trend_fields) if trend_fields is not None else None)
    client = context.client()
    if raw:
        context.print_raw(client.trends.get_by_woeid(woeid, max_trends=limit, fields=fields, raw=True), mode)
        return
    context.print_data(client.trends.get_by_woeid(woeid, max_trends=limit, fields=fields), mode, "trends")


@trends_app.command("lookup", hidden=True)
def trends_lookup(
    ctx: typer.Context,
    args: List[str] = typer.Argument(None, metavar="WOEID|LOCATION..."),
    query: str | None = typer.Option(None, "--query", help="Location query"),
    max_trends: str | None = typer.Option(None, "--max-trends", help="Max trends to return (1-50)"),
    trend_fields: str | None = typer.Option(None, "--trend-fields", help="Maps to trend.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        _run_trends(context, list(args or []), query, max_trends, trend_fields, mode, raw)


@trends_app.command("by-woeid")
def trends_by_woeid(
    ctx: typer.Context,
    args: List[str] = typer.Argument(None, metavar="WOEID|LOCATION..."),
    query: str | None = typer.Option(None, "--query", help="Location query"),
    max_trends: str | None = typer.Option(None, "--max-trends", help="Max trends to return (1-50)"),
    trend_fields: str | None = typer.Option(None, "--trend-fields", help="Maps to trend.fields"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
    raw: bool = typer.Option(False, "--raw", help="Raw HTTP output (debug)"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        _run_trends(context, list(args or []), query, max_trends, trend_fields, mode, raw)


@trends_app.command("search")
def trends_search(
    ctx: typer.Context,
    args: List[str] = typer.Argument(None, metavar="LOCATION..."),
    query: str | None = typer.Option(None, "--query", help="Location query"),
    limit: str | None = typer.Option(None, "--limit", help="WOEID search result limit (1-100)"),
    json_output: bool = typer.Option(False, "--json", help="Output compact JSON"),
    json_pretty: bool = typer.Option(False, "--json-pretty", "--pretty", help="Output pretty JSON"),
) -> None:
    context = _build_context(ctx)
    mode = resolve_output_mode(json_output=json_output, json_pretty=json_pretty)
    with context.guard(mode):
        text = parse_search_query(query, list(args or []))
        count = parse_bounded_int(limit, "--limit", 1, 100) or 10
        matches = search_woeid(text, limit=count, loader=context.load_woeid_index)

        if mode == "human":
            context.emit(render_woeid_matches(text, matches, context.output, max_width=context.max_width))
            if matches:
                typer.echo("")
                typer.echo(context.output.style(f"Try: xcli trends {matches[0].woeid}", "dim"))
        else:
            context.print_json(
                {"query": text, "count": len(matches), "matches": [match.to_dict() for match in matches]}, mode
            )
        if not matches:
            raise typer.Exit(code=1)


@app.command("fields")
def fields_command(topic: str | None = typer.Argument(None, help="users|posts|trends")) -> None:
    """Show field and expansion references."""
    if not topic:
        typer.echo("Usage: xcli fields <users|posts|trends>")
        return
    lines = FIELD_REFERENCES.get(topic.lower())
    if lines is None:
        typer.echo("Unknown topic. Use: xcli fields users|posts|trends", err=True)
        raise typer.Exit(code=1)
    for line in lines:
        typer.echo(line)


@app.command("help")
def help_command(ctx: typer.Context, command: List[str] = typer.Argument(None)) -> None:
    """Show help for a command or sub-command."""
    parent = ctx.parent or ctx
    current: click.Command = get_command(app)
    current_ctx = parent
    for name in command or []:
        if not isinstance(current, click.Group):
            break
        subcommand = current.get_command(current_ctx, name)
        if subcommand is None:
            typer.echo(f"Unknown command: {' '.join(command)}", err=True)
            raise typer.Exit(code=2)
        current_ctx = click.Context(subcommand, info_name=name, parent=current_ctx)
        current = subcommand
    typer.echo(current.get_help(current_ctx))
