"""HTTP client construction for talking to Themis instances."""

import httpx

from themis_notifier.core.config import THEMIS_API_KEY, Settings


def build_client(settings: Settings) -> httpx.Client:
    """Return a fresh httpx.Client honouring the configured timeout and proxy.

    Environment proxies (HTTP_PROXY, NO_PROXY, ...) still apply when no
    explicit proxy is configured.
    """
    kwargs: dict = {"timeout": httpx.Timeout(settings.request_timeout)}
    if settings.proxy:
        kwargs["proxy"] = settings.proxy
    return httpx.Client(**kwargs)


def api_key_headers(api_key: str) -> dict[str, str]:
    return {THEMIS_API_KEY: api_key}
