from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path, PurePosixPath
import re
from typing import Any, Literal
from urllib.parse import urlsplit

import httpx

from .responses import get_object, get_string, objects, to_array
from .version import user_agent

log = logging.getLogger(__name__)

MediaSource = Literal["url", "preview_image_url"]

DEFAULT_MEDIA_DIR = "./xcli-media"

_SEGMENT_REGEX = re.compile(r"[^A-Za-z0-9._-]+")
_EXTENSION_REGEX = re.compile(r"\.[a-z0-9]{1,8}")
_PREFERRED_TYPE_ORDER = ["photo", "video", "animated_gif", "unknown"]
_SHORT_TYPE_NAMES = {"photo": "img", "video": "vid", "animated_gif": "gif", "unknown": "unk"}


@dataclass
class PostMediaSummary:
    total: int
    downloadable: int
    byType: dict[str, int]


@dataclass(frozen=True)
class DownloadablePostMedia:
    postId: str
    mediaKey: str
    type: str
    url: str
    source: MediaSource


@dataclass
class MediaDownloadReport:
    outputDir: str
    attempted: int = 0
    downloaded: int = 0
    failed: int = 0
    files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class CollectedPostMedia:
    summaries: dict[str, PostMediaSummary]
    downloadable: list[DownloadablePostMedia]


def _unique_strings(values: list[Any]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            continue
        item = value.strip()
        if item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def post_media_keys(post: dict) -> list[str]:
    attachments = get_object(post.get("attachments"))
    if not attachments:
        return []
    raw = attachments.get("media_keys", attachments.get("mediaKeys"))
    return _unique_strings(to_array(raw))


def pick_download_url(media: dict) -> tuple[str, MediaSource] | None:
    direct = get_string(media, "url")
    if direct:
        return direct, "url"
    preview = get_string(media, "preview_image_url", "previewImageUrl")
    if preview:
        return preview, "preview_image_url"
    return None


def media_by_key(response: Any) -> dict[str, dict]:
    obj = get_object(response) or {}
    includes = get_object(obj.get("includes")) or {}
    result: dict[str, dict] = {}
    for media in objects(includes.get("media")):
        key = get_string(media, "media_key", "mediaKey")
        if key:
            result[key] = media
    return result


def collect_post_media(response: Any) -> CollectedPostMedia:
    summaries: dict[str, PostMediaSummary] = {}
    downloadable: list[DownloadablePostMedia] = []

    obj = get_object(response)
    if not obj:
        return CollectedPostMedia(summaries=summaries, downloadable=downloadable)

    lookup = media_by_key(obj)
    for post in objects(obj.get("data")):
        post_id = get_string(post, "id") or "unknown"
        keys = post_media_keys(post)
        if not keys:
            continue

        by_type: dict[str, int] = {}
        downloadable_count = 0
        for key in keys:
            media = lookup.get(key)
            media_type = get_string(media, "type") or "unknown"
            by_type[media_type] = by_type.get(media_type, 0) + 1
            if not media:
                continue
            picked = pick_download_url(media)
            if not picked:
                continue
            downloadable_count += 1
            downloadable.append(
                DownloadablePostMedia(postId=post_id, mediaKey=key, type=media_type, url=picked[0], source=picked[1])
            )

        summaries[post_id] = PostMediaSummary(total=len(keys), downloadable=downloadable_count, byType=by_type)

    return CollectedPostMedia(summaries=summaries, downloadable=downloadable)


def _short_type_name(media_type: str) -> str:
    return _SHORT_TYPE_NAMES.get(media_type, media_type[:3].lower())


def format_post_media_summary(summary: PostMediaSummary | None) -> str:
    if not summary or summary.total == 0:
        return "-"
    ordered = [t for t in _PREFERRED_TYPE_ORDER if summary.byType.get(t, 0) > 0]
    ordered += sorted(t for t, n in summary.byType.items() if t not in _PREFERRED_TYPE_ORDER and n > 0)
    parts = [f"{_short_type_name(t)}{summary.byType[t]}" for t in ordered]
    return ",".join(parts) if parts else "-"


def format_post_media_downloadable(summary: PostMediaSummary | None) -> str:
    if not summary or summary.total == 0:
        return "-"
    return f"{summary.downloadable}/{summary.total}"


def sanitize_segment(value: str) -> str:
    sanitized = _SEGMENT_REGEX.sub("_", value).strip("_")
    return sanitized or "item"


def infer_extension(asset: DownloadablePostMedia) -> str:
    try:
        suffix = PurePosixPath(urlsplit(asset.url).path).suffix.lower()
    except ValueError:
        suffix = ""
    if _EXTENSION_REGEX.fullmatch(suffix):
        return suffix
    if asset.type == "photo" or asset.source == "preview_image_url":
        return ".jpg"
    if asset.type == "video":
        return ".mp4"
    if asset.type == "animated_gif":
        return ".gif"
    return ".bin"


def media_file_name(asset: DownloadablePostMedia) -> str:
    return f"{sanitize_segment(asset.postId)}_{sanitize_segment(asset.mediaKey)}_{asset.source}{infer_extension(asset)}"


def resolve_output_dir(value: str) -> Path:
    return Path(value.strip()).expanduser().resolve()


def dedupe_assets(assets: list[DownloadablePostMedia]) -> list[DownloadablePostMedia]:
    unique: dict[tuple[str, str, str], DownloadablePostMedia] = {}
    for asset in assets:
        unique[(asset.postId, asset.mediaKey, asset.url)] = asset
    return list(unique.values())


def download_post_media_assets(
    assets: list[DownloadablePostMedia],
    output_dir: str = DEFAULT_MEDIA_DIR,
    *,
    client: httpx.Client | None = None,
) -> MediaDownloadReport:
    directory = resolve_output_dir(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    deduped = dedupe_assets(assets)
    report = MediaDownloadReport(outputDir=str(directory), attempted=len(deduped))

    owns_client = client is None
    http = client or httpx.Client(follow_redirects=True, timeout=60, headers={"user-agent": user_agent()})
    try:
        for asset in deduped:
            path = directory / media_file_name(asset)
            try:
                response = http.get(asset.url)
                if response.status_code < 200 or response.status_code >= 300:
                    raise RuntimeError(f"HTTP {response.status_code} {response.reason_phrase}".strip())
                path.write_bytes(response.content)
            except (httpx.HTTPError, httpx.InvalidURL, OSError, RuntimeError) as exc:
                log.debug("Download failed for %s: %s", asset.url, exc)
                report.failed += 1
                report.errors.append(f"{asset.url} ({exc})")
                continue
            report.downloaded += 1
            report.files.append(str(path))
    finally:
        if owns_client:
            http.close()
    return report
