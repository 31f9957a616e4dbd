from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DIST_NAME = "xcli"
DEV_VERSION = "0.0.0+dev"


def get_cli_version() -> str:
    try:
        return version(DIST_NAME)
    except PackageNotFoundError:
        return DEV_VERSION


def user_agent() -> str:
    """``User-Agent`` header sent with every X API and media request."""
    return f"{DIST_NAME}/{get_cli_version()}"
