import pytest

from xcli.errors import ConfigError
from xcli.options import (
    parse_bounded_int,
    parse_search_query,
    parse_woeid_argument,
    posts_lookup_fields,
    posts_search_options,
    users_lookup_fields,
    users_search_options,
)


def test_user_presets_and_overrides():
    assert users_lookup_fields().to_params() == {"user.fields": "public_metrics,verified,verified_type"}
    fields = users_lookup_fields(preset="profile", user_fields="id,name", expansions="pinned_tweet_id")
    assert fields.to_params() == {"user.fields": "id,name", "expansions": "pinned_tweet_id"}
    with pytest.raises(ConfigError):
        users_lookup_fields(preset="everything")


def test_post_presets():
    params = posts_lookup_fields().to_params()
    assert "entities" in params["tweet.fields"]
    assert params["expansions"] == "author_id,attachments.media_keys"
    assert posts_lookup_fields(preset="minimal").to_params() == {}


def test_search_query_sources():
    assert parse_search_query(None, ["from:jack", "lang:en"]) == "from:jack lang:en"
    assert parse_search_query(" from:jack ", []) == "from:jack"
    with pytest.raises(ConfigError):
        parse_search_query("a", ["b"])
    with pytest.raises(ConfigError):
        parse_search_query(None, [])


def test_bounded_ints():
    assert parse_bounded_int(None, "--limit", 1, 100) is None
    assert parse_bounded_int("50", "--limit", 1, 100) == 50
    with pytest.raises(ConfigError) as excinfo:
        parse_bounded_int("101", "--limit", 1, 100)
    assert "between 1 and 100" in str(excinfo.value)
    with pytest.raises(ConfigError):
        parse_bounded_int("abc", "--limit", 1, 100)


def test_search_option_bounds():
    assert users_search_options(max_results="1000").max_results == 1000
    with pytest.raises(ConfigError):
        users_search_options(max_results="1001")
    assert posts_search_options("all", max_results="500").max_results == 500
    with pytest.raises(ConfigError):
        posts_search_options("recent", max_results="500")
    with pytest.raises(ConfigError):
        posts_search_options("recent", max_results="9")


def test_search_option_validation():
    with pytest.raises(ConfigError):
        posts_search_options("recent", next_token="a", pagination_token="b")
    with pytest.raises(ConfigError):
        posts_search_options("recent", since_id="abc")
    with pytest.raises(ConfigError):
        posts_search_options("recent", sort_order="oldest")
    options = posts_search_options("recent", since_id="1", sort_order="relevancy")
    assert options.to_params() == {"since_id": "1", "sort_order": "relevancy"}


def test_woeid_argument_range():
    assert parse_woeid_argument("1") == 1
    with pytest.raises(ConfigError):
        parse_woeid_argument("0")
    with pytest.raises(ConfigError):
        parse_woeid_argument("2147483648")
