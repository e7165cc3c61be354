"""Short link and path prefix helpers shared by the API and web routes. No app imports to avoid circular deps."""

from starlette.requests import Request

from shortener.common.headers import build_base_url, get_forwarded_path_prefix
from shortener.common.url_builder import build_short_url


def path_prefix_for_html(request: Request) -> str:
    """Path prefix only when the request came through a proxy (X-Forwarded-Prefix).

    Direct access keeps root-relative links; behind a path-stripping proxy links
    get the stripped prefix back.
    """
    return get_forwarded_path_prefix(dict(request.headers))


def short_link_for(request: Request, short_code: str) -> str:
    """Public short link for ``short_code`` as seen by this request's client."""
    config = request.app.state.config

    base_url = build_base_url(
        headers=dict(request.headers),
        fallback_base_url=config.base_url,
        request_scheme=request.url.scheme,
        request_host=request.headers.get("host"),
    )
    # Proxy prefix wins over the configured one so links match the public path
    path_prefix = path_prefix_for_html(request) or config.path_prefix

    return build_short_url(
        short_code=short_code,
        base_url=base_url,
        path_prefix=path_prefix,
    )
