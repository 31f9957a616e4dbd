from __future__ import annotations

import json
from typing import Any

from .errors import ApiError
from .links import rewrite_post_links
from .media import (
    MediaDownloadReport,
    collect_post_media,
    format_post_media_downloadable,
    format_post_media_summary,
)
from .output import OutputConfig
from .responses import (
    compact_whitespace,
    format_date_short,
    format_number,
    get_field,
    get_object,
    get_string,
    objects,
    to_array,
    truncate,
)
from .table import render_table
from .woeid import WoeidMatch
from .x_client import RawResponse

RATE_LIMIT_HEADERS = ["x-rate-limit-limit", "x-rate-limit-remaining", "x-rate-limit-reset"]


def _table(out: OutputConfig, headers: list[str], rows: list[list[str]], max_width: int | None, **kwargs) -> list[str]:
    return render_table([out.style(h, bold=True) for h in headers], rows, max_width=max_width, **kwargs)


def _warnings(obj: dict, out: OutputConfig) -> list[str]:
    errors = to_array(obj.get("errors"))
    if not errors:
        return []
    return ["", out.style(f"Partial errors: {len(errors)}", "yellow")]


def _meta(obj: dict, out: OutputConfig) -> list[str]:
    meta = get_object(obj.get("meta"))
    if not meta:
        return []
    result_count = get_field(meta, ["result_count", "resultCount"], "number")
    next_token = get_field(meta, ["next_token", "nextToken"], "string")
    parts = []
    if result_count is not None:
        parts.append(f"result_count={result_count}")
    if next_token is not None:
        parts.append(f"next_token={next_token}")
    if not parts:
        return []
    return ["", out.style(f"Meta: {' '.join(parts)}", "dim")]


def render_users(response: Any, out: OutputConfig, *, max_width: int | None = None) -> list[str]:
    obj = get_object(response)
    if not obj:
        return ["No response data."]

    users = objects(obj.get("data"))
    if not users:
        return [out.style("No users returned.", "yellow"), *_warnings(obj, out), *_meta(obj, out)]

    lines = [out.style(f"Users ({len(users)})", "cyan")]
    rows = []
    for user in users:
        metrics = get_field(user, ["public_metrics", "publicMetrics"], "object")
        username = get_string(user, "username")
        verified = get_field(user, ["verified"], "bool") is True
        rows.append(
            [
                get_string(user, "id") or "-",
                truncate(f"@{username}", 24) if username else "-",
                truncate(get_string(user, "name") or "-", 28),
                out.style("yes", "green") if verified else "no",
                format_number(get_field(metrics, ["followers_count", "followersCount"], "number")),
                format_number(get_field(metrics, ["tweet_count", "tweetCount"], "number")),
            ]
        )
    lines += _table(out, ["ID", "Username", "Name", "Verified", "Followers", "Posts"], rows, max_width)

    if len(users) == 1:
        description = get_string(users[0], "description")
        if description:
            lines += ["", out.style("Bio", bold=True), description]

    return lines + _warnings(obj, out) + _meta(obj, out)


def _author_labels(obj: dict) -> dict[str, str]:
    includes = get_object(obj.get("includes")) or {}
    labels: dict[str, str] = {}
    for user in objects(includes.get("users")):
        user_id = get_string(user, "id")
        username = get_string(user, "username")
        if user_id and username:
            labels[user_id] = f"@{username}"
    return labels


def render_posts(response: Any, out: OutputConfig, *, max_width: int | None = None) -> list[str]:
    obj = get_object(response)
    if not obj:
        return ["No response data."]

    posts = objects(obj.get("data"))
    if not posts:
        return [out.style("No posts returned.", "yellow"), *_warnings(obj, out), *_meta(obj, out)]

    authors = _author_labels(obj)
    summaries = collect_post_media(obj).summaries
    show_media = bool(summaries)

    headers = ["ID", "Author", "Created", "Likes", "Replies", "Reposts"]
    if show_media:
        headers += ["Media", "DL"]
    headers.append("Text")

    rows = []
    for post in posts:
        post_id = get_string(post, "id") or "-"
        metrics = get_field(post, ["public_metrics", "publicMetrics"], "object")
        author_id = get_string(post, "author_id", "authorId")
        text = compact_whitespace(rewrite_post_links(post)) or "-"
        row = [
            post_id,
            authors.get(author_id, author_id) if author_id else "-",
            format_date_short(get_field(post, ["created_at", "createdAt"], "string")),
            format_number(get_field(metrics, ["like_count", "likeCount"], "number")),
            format_number(get_field(metrics, ["reply_count", "replyCount"], "number")),
            format_number(get_field(metrics, ["retweet_count", "retweetCount", "repost_count", "repostCount"], "number")),
        ]
        if show_media:
            summary = summaries.get(post_id)
            row += [format_post_media_summary(summary), format_post_media_downloadable(summary)]
        row.append(text)
        rows.append(row)

    min_widths: list[int | None] = [None] * (len(headers) - 1) + [24]
    lines = [out.style(f"Posts ({len(posts)})", "cyan")]
    lines += _table(out, headers, rows, max_width, min_widths=min_widths)
    return lines + _warnings(obj, out) + _meta(obj, out)


def render_trends(response: Any, out: OutputConfig, *, max_width: int | None = None) -> list[str]:
    obj = get_object(response)
    if not obj:
        return ["No response data."]

    trends = objects(obj.get("data"))
    if not trends:
        return [out.style("No trends returned.", "yellow"), *_warnings(obj, out)]

    rows = []
    for trend in trends:
        name = get_field(trend, ["trend_name", "trendName", "name"], "string") or "-"
        count = get_field(
            trend,
            ["tweet_count", "tweetCount", "tweet_volume", "tweetVolume", "post_count", "postCount"],
            "number",
        )
        rows.append([truncate(name, 64), format_number(count)])

    lines = [out.style(f"Trends ({len(trends)})", "cyan")]
    lines += _table(out, ["Name", "Post Count"], rows, max_width)
    return lines + _warnings(obj, out)


def render_woeid_matches(
    query: str, matches: list[WoeidMatch], out: OutputConfig, *, max_width: int | None = None
) -> list[str]:
    if not matches:
        return [out.style(f"No WOEID matches for '{query}'.", "yellow")]

    rows = [
        [
            str(match.record.woeid),
            truncate(match.record.placeName, 32),
            truncate(match.record.country or "-", 24),
            match.record.countryCode or "-",
            match.record.placeType or "-",
        ]
        for match in matches
    ]
    lines = [out.style(f"WOEID matches for '{query}'", "cyan")]
    return lines + _table(out, ["WOEID", "Place", "Country", "Code", "Type"], rows, max_width)


def render_raw(payload: RawResponse, out: OutputConfig) -> list[str]:
    ok = 200 <= payload.status < 300
    label = f"HTTP {payload.status} {payload.statusText}".strip()
    lines = [out.style(label, "green" if ok else "red")]

    present = [
        f"{name}: {payload.headers[name]}"
        for name in [*RATE_LIMIT_HEADERS, "content-type"]
        if name in payload.headers
    ]
    if present:
        lines.append("")
        lines += [out.style(line, "dim") for line in present]

    lines.append("")
    if isinstance(payload.body, str):
        lines.append(payload.body)
    else:
        lines.append(json.dumps(payload.body, indent=2, ensure_ascii=False))
    return lines


def render_api_error(err: ApiError, out: OutputConfig) -> list[str]:
    lines = [out.style(f"API error {err.status} {err.status_text}".strip(), "red"), err.message]

    if err.status in (401, 403):
        lines.append(
            out.style("Auth note: some endpoints may require user-context OAuth tokens for your account tier.", "yellow")
        )

    if err.status == 429:
        bits = [
            f"{name.rsplit('-', 1)[-1]}={err.headers[name]}" for name in RATE_LIMIT_HEADERS if err.headers.get(name)
        ]
        if bits:
            lines.append(out.style(f"Rate limit: {' '.join(bits)}", "yellow"))

    for error in objects((get_object(err.data) or {}).get("errors")):
        detail = get_string(error, "detail") or get_string(error, "title") or json.dumps(error)
        lines.append(out.style(f"- {detail}", "yellow"))
    return lines


def render_download_report(report: MediaDownloadReport, out: OutputConfig, *, sample: int = 3) -> list[str]:
    line = f"Media download: downloaded {report.downloaded}/{report.attempted} file(s) to {report.outputDir}"
    lines = [out.style(line, "green" if report.downloaded > 0 else "yellow")]
    for error in report.errors[:sample]:
        lines.append(out.style(f"- {error}", "yellow"))
    remaining = len(report.errors) - sample
    if remaining > 0:
        lines.append(out.style(f"... and {remaining} more download error(s).", "yellow"))
    return lines
