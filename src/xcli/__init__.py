from .errors import ApiError, ConfigError, WoeidUnavailableError
from .options import RequestFields, SearchOptions
from .woeid import ResolvedWoeid, WoeidMatch, WoeidRecord, resolve_woeid, search_woeid
from .x_client import RawResponse, XClient

__all__ = [
    "ApiError",
    "ConfigError",
    "RawResponse",
    "RequestFields",
    "ResolvedWoeid",
    "SearchOptions",
    "WoeidMatch",
    "WoeidRecord",
    "WoeidUnavailableError",
    "XClient",
    "resolve_woeid",
    "search_woeid",
]
