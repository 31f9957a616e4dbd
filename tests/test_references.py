import pytest

from xcli.errors import ConfigError
from xcli.references import (
    IdRef,
    InvalidRef,
    UsernameRef,
    classify_post_reference,
    classify_user_reference,
    require_at_most,
    resolve_post_references,
    resolve_user_references,
)


@pytest.mark.parametrize("value", ["1", "0042", "1228393702244134912"])
def test_numeric_input_is_id_for_users_and_posts(value):
    assert classify_user_reference(value) == IdRef(value=value, source=value)
    assert classify_post_reference(value) == IdRef(value=value, source=value)


@pytest.mark.parametrize("host", ["x.com", "twitter.com", "www.x.com", "WWW.Twitter.com"])
def test_status_url_yields_post_id_and_author(host):
    url = f"https://{host}/XDevelopers/status/1228393702244134912"
    post = classify_post_reference(url)
    user = classify_user_reference(url)
    assert isinstance(post, IdRef) and post.value == "1228393702244134912"
    assert isinstance(user, UsernameRef) and user.value == "XDevelopers"


def test_web_status_url_is_post_id():
    ref = classify_post_reference("https://x.com/i/web/status/99")
    assert ref.kind == "id"
    assert ref.value == "99"


def test_at_username():
    ref = classify_user_reference("@" + "a" * 50)
    assert ref == UsernameRef(value="a" * 50, source="@" + "a" * 50)
    too_long = classify_user_reference("@" + "a" * 51)
    assert too_long.kind == "invalid"
    assert too_long.reason == "Expected an ID, username, or URL."


def test_profile_urls():
    assert classify_user_reference("https://x.com/jack").value == "jack"
    assert classify_user_reference("https://x.com/%40jack?s=20").value == "jack"
    assert classify_user_reference("https://x.com/i/user/12").kind == "id"


def test_reserved_path_is_rejected():
    ref = classify_user_reference("https://x.com/home")
    assert isinstance(ref, InvalidRef)
    assert ref.reason == "'home' is a reserved path, not a username."


def test_foreign_host_is_rejected():
    ref = classify_user_reference("https://example.com/jack")
    assert ref.reason == "URL must be on x.com or twitter.com."
    assert classify_post_reference("https://example.com/a/status/1").reason == ref.reason


def test_invalid_post_inputs():
    assert classify_post_reference("jack").reason == "Expected a numeric Post ID or status URL."
    assert classify_post_reference("https://x.com/jack").reason == "Could not determine a Post ID from URL."
    assert classify_post_reference("https://").reason == "Invalid URL."


def test_describe_invalid():
    ref = classify_user_reference("not valid!")
    assert ref.describe() == "Invalid input 'not valid!': Expected an ID, username, or URL."


def test_resolve_user_references_partitions_and_dedupes():
    resolved = resolve_user_references(["12", "@jack", "jack", "12", "https://x.com/XDevelopers", "??"])
    assert resolved.ids == ["12"]
    assert resolved.usernames == ["jack", "XDevelopers"]
    assert [bad.source for bad in resolved.invalid] == ["??"]
    assert not resolved.ok


def test_resolve_reports_every_invalid_input():
    resolved = resolve_post_references(["1", "nope", "https://example.com/a/status/2", "also-bad"])
    assert resolved.ids == ["1"]
    assert [bad.source for bad in resolved.invalid] == ["nope", "https://example.com/a/status/2", "also-bad"]


def test_limits_name_group_and_count():
    resolved = resolve_user_references([f"user{i}" for i in range(101)])
    with pytest.raises(ConfigError) as excinfo:
        resolved.enforce_limits("users")
    assert "usernames" in str(excinfo.value)
    assert "101" in str(excinfo.value)


def test_require_at_most_allows_limit():
    require_at_most([str(i) for i in range(100)], "posts IDs")


@pytest.mark.parametrize("value", ["123\n", "jack\n", "١٢٣", "12 "])
def test_trailing_newline_and_non_ascii_digits_are_invalid(value):
    assert classify_user_reference(value).kind == "invalid"
    assert classify_post_reference(value).kind == "invalid"


def test_non_ascii_digits_in_status_url():
    ref = classify_post_reference("https://x.com/jack/status/١٢٣")
    assert ref.reason == "Could not determine a Post ID from URL."
