from xcli.extract import (
    dedupe,
    extract_post_id,
    is_accepted_host,
    is_numeric_id,
    is_username,
    parse_csv,
    strip_at_prefix,
)


def test_extract_post_id_from_status_url():
    assert extract_post_id("/XDevelopers/status/1228393702244134912") == "1228393702244134912"


def test_extract_post_id_from_web_status_url():
    assert extract_post_id("/i/web/status/42") == "42"
    assert extract_post_id("/XDevelopers") is None


def test_is_numeric_id():
    assert is_numeric_id("1234567890")
    assert not is_numeric_id("12a")
    assert not is_numeric_id("")


def test_is_username():
    assert is_username("jack")
    assert is_username("a" * 50)
    assert not is_username("a" * 51)
    assert not is_username("bad-handle")


def test_hosts_ignore_case_and_www():
    assert is_accepted_host("WWW.X.com")
    assert is_accepted_host("twitter.com")
    assert not is_accepted_host("example.com")


def test_small_helpers():
    assert strip_at_prefix("@jack") == "jack"
    assert strip_at_prefix("jack") == "jack"
    assert parse_csv(" a, b ,,c ") == ["a", "b", "c"]
    assert dedupe(["b", "a", "b"]) == ["b", "a"]


def test_predicates_reject_newlines_and_non_ascii_digits():
    assert not is_numeric_id("123\n")
    assert not is_numeric_id("١٢٣")
    assert not is_username("jack\n")
    assert extract_post_id("/jack/status/١٢٣") is None
