import httpx
import pytest

from xcli.errors import ApiError
from xcli.options import RequestFields, SearchOptions
from xcli.x_client import RawResponse, XClient


def _client(handler):
    return XClient("token", transport=httpx.MockTransport(handler))


def test_get_by_usernames_sends_auth_and_fields():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        seen["auth"] = request.headers["authorization"]
        return httpx.Response(200, json={"data": [{"id": "1", "username": "jack"}]})

    with _client(handler) as client:
        data = client.users.get_by_usernames(["jack", "XDevelopers"], RequestFields(user_fields=["verified"]))

    assert data["data"][0]["username"] == "jack"
    assert seen["auth"] == "Bearer token"
    assert seen["url"].path == "/2/users/by"
    assert seen["url"].params["usernames"] == "jack,XDevelopers"
    assert seen["url"].params["user.fields"] == "verified"


def test_search_recent_params():
    seen = {}

    def handler(request):
        seen["url"] = request.url
        return httpx.Response(200, json={"data": [], "meta": {"result_count": 0}})

    with _client(handler) as client:
        client.posts.search_recent("from:jack", SearchOptions(max_results=10, sort_order="recency"))

    assert seen["url"].path == "/2/tweets/search/recent"
    assert seen["url"].params["query"] == "from:jack"
    assert seen["url"].params["max_results"] == "10"
    assert seen["url"].params["sort_order"] == "recency"


def test_api_error_carries_status_headers_and_body():
    def handler(request):
        return httpx.Response(
            429,
            headers={"x-rate-limit-remaining": "0"},
            json={"title": "Too Many Requests", "detail": "Rate limit exceeded"},
        )

    with _client(handler) as client:
        with pytest.raises(ApiError) as excinfo:
            client.trends.get_by_woeid(1, max_trends=5)

    err = excinfo.value
    assert err.status == 429
    assert err.message == "Rate limit exceeded"
    assert err.headers["x-rate-limit-remaining"] == "0"
    assert err.to_dict()["error"]["data"]["title"] == "Too Many Requests"


def test_raw_mode_returns_wrapper_without_raising():
    def handler(request):
        return httpx.Response(404, text="not here")

    with _client(handler) as client:
        raw = client.posts.get_by_id("1", raw=True)

    assert isinstance(raw, RawResponse)
    assert raw.status == 404
    assert raw.body == "not here"


def test_bearer_token_required():
    with pytest.raises(ValueError):
        XClient("")
