import httpx

from xcli.media import (
    DownloadablePostMedia,
    PostMediaSummary,
    collect_post_media,
    download_post_media_assets,
    format_post_media_downloadable,
    format_post_media_summary,
    infer_extension,
    media_file_name,
    sanitize_segment,
)

RESPONSE = {
    "data": [
        {"id": "10", "attachments": {"media_keys": ["3_a", "3_b", "7_c"]}},
        {"id": "11", "text": "no media"},
    ],
    "includes": {
        "media": [
            {"media_key": "3_a", "type": "photo", "url": "https://pbs.twimg.com/media/a.png"},
            {"media_key": "3_b", "type": "photo"},
            {"mediaKey": "7_c", "type": "video", "previewImageUrl": "https://pbs.twimg.com/thumb/c.jpg"},
        ]
    },
}


def test_collect_post_media_summary():
    collected = collect_post_media(RESPONSE)
    summary = collected.summaries["10"]
    assert summary == PostMediaSummary(total=3, downloadable=2, byType={"photo": 2, "video": 1})
    assert "11" not in collected.summaries
    assert [(a.mediaKey, a.source) for a in collected.downloadable] == [("3_a", "url"), ("7_c", "preview_image_url")]


def test_missing_media_counts_as_unknown():
    collected = collect_post_media({"data": {"id": "1", "attachments": {"media_keys": ["x"]}}})
    assert collected.summaries["1"].byType == {"unknown": 1}
    assert collected.downloadable == []


def test_summary_formatting():
    summary = PostMediaSummary(total=4, downloadable=3, byType={"video": 1, "photo": 2, "poll": 1})
    assert format_post_media_summary(summary) == "img2,vid1,pol1"
    assert format_post_media_downloadable(summary) == "3/4"
    assert format_post_media_summary(None) == "-"
    assert format_post_media_downloadable(None) == "-"


def test_file_names():
    assert sanitize_segment("__a/b c__") == "a_b_c"
    assert sanitize_segment("///") == "item"
    photo = DownloadablePostMedia("10", "3_a", "photo", "https://pbs.twimg.com/media/a.PNG?x=1", "url")
    assert media_file_name(photo) == "10_3_a_url.png"
    video = DownloadablePostMedia("10", "7_c", "video", "https://video.twimg.com/v/file", "url")
    assert infer_extension(video) == ".mp4"
    preview = DownloadablePostMedia("10", "7_c", "video", "https://pbs.twimg.com/thumb/c", "preview_image_url")
    assert infer_extension(preview) == ".jpg"
    other = DownloadablePostMedia("10", "9", "poll", "https://example.com/x", "url")
    assert infer_extension(other) == ".bin"


def test_download_failures_are_collected(tmp_path):
    def handler(request):
        if request.url.path.endswith("missing.jpg"):
            return httpx.Response(404)
        return httpx.Response(200, content=b"bytes")

    assets = [
        DownloadablePostMedia("10", "a", "photo", "https://pbs.twimg.com/media/ok.jpg", "url"),
        DownloadablePostMedia("10", "a", "photo", "https://pbs.twimg.com/media/ok.jpg", "url"),
        DownloadablePostMedia("10", "b", "photo", "https://pbs.twimg.com/media/missing.jpg", "url"),
    ]
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        report = download_post_media_assets(assets, str(tmp_path / "out"), client=client)

    assert report.attempted == 2
    assert report.downloaded == 1
    assert report.failed == 1
    assert (tmp_path / "out" / "10_a_url.jpg").read_bytes() == b"bytes"
    assert "missing.jpg" in report.errors[0]
    assert "404" in report.errors[0]


def test_malformed_url_does_not_stop_other_downloads(tmp_path):
    def handler(request):
        return httpx.Response(200, content=b"ok")

    assets = [
        DownloadablePostMedia("10", "bad", "photo", "https://exa\x00mple.com/a.jpg", "url"),
        DownloadablePostMedia("10", "good", "photo", "https://pbs.twimg.com/ok.jpg", "url"),
    ]
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        report = download_post_media_assets(assets, str(tmp_path), client=client)

    assert report.attempted == 2
    assert report.failed == 1
    assert report.downloaded == 1
    assert (tmp_path / "10_good_url.jpg").read_bytes() == b"ok"
