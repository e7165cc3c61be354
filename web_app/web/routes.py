"""Web interface routes implementation."""

import os
from typing import Optional

from fastapi import APIRouter, Request, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from shortener.common.validators import is_valid_short_code
from shortener.errors import CodeConflictError, CodeGenerationExhaustedError
from ..links import path_prefix_for_html, short_link_for

router = APIRouter()

# Setup Jinja2 templates
template_dir = os.path.join(os.path.dirname(__file__), "..", "templates")
templates = Jinja2Templates(directory=template_dir)


def _error_page(request: Request, message: str, status_code: int) -> HTMLResponse:
    """Render the error page; links honour X-Forwarded-Prefix."""
    return templates.TemplateResponse(
        request,
        "error.html",
        {"prefix": path_prefix_for_html(request), "error_message": message},
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def homepage(request: Request):
    """Serve the homepage with the creation form."""
    config = request.app.state.config
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "prefix": path_prefix_for_html(request),
            "default_validity": config.default_validity_minutes,
            "max_validity": config.max_validity_minutes,
            "custom_codes_enabled": config.enable_custom_codes,
        },
    )


@router.post("/create", response_class=HTMLResponse, include_in_schema=False)
async def create_short_url_web(
    request: Request,
    url: str = Form(...),
    validity: Optional[str] = Form(None),
    custom_code: Optional[str] = Form(None),
):
    """Handle form submission to create short URL."""
    service = request.app.state.service

    # Clean up custom code (empty string to None)
    if custom_code and custom_code.strip():
        custom_code = custom_code.strip()
    else:
        custom_code = None

    validity_minutes = None
    if validity and validity.strip():
        try:
            validity_minutes = int(validity.strip())
        except ValueError:
            return _error_page(request, "Validity must be a whole number of minutes", 400)

    try:
        result = await service.create_short_url(
            original_url=url.strip(),
            validity_minutes=validity_minutes,
            custom_code=custom_code,
        )
    except CodeConflictError as e:
        return _error_page(request, str(e), 409)
    except CodeGenerationExhaustedError as e:
        return _error_page(request, str(e), 503)
    except ValueError as e:
        return _error_page(request, str(e), 400)

    # Relative redirect so it works with or without proxy path (browser resolves relative to current path)
    return RedirectResponse(
        url=f"result/{result.short_code}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/result/{short_code}", response_class=HTMLResponse, include_in_schema=False)
async def result_page(request: Request, short_code: str):
    """Show result page with short URL."""
    service = request.app.state.service

    mapping = await service.get_url_info(short_code)

    if not mapping:
        return _error_page(request, f"Short code '{short_code}' not found", 404)

    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "prefix": path_prefix_for_html(request),
            "short_url": short_link_for(request, short_code),
            "mapping": mapping,
        },
    )


@router.get("/stats", response_class=HTMLResponse, include_in_schema=False)
async def stats_page(request: Request):
    """Show live short URLs and their click counts."""
    service = request.app.state.service

    mappings = await service.list_urls(include_expired=False)
    rows = [
        {"short_url": short_link_for(request, m.short_code), "mapping": m}
        for m in mappings
    ]

    return templates.TemplateResponse(
        request,
        "stats.html",
        {"prefix": path_prefix_for_html(request), "rows": rows},
    )


@router.get("/health", include_in_schema=False)
async def health_check_web(request: Request):
    """Health check endpoint (simple version for load balancers)."""
    service = request.app.state.service

    health = await service.health_check()

    if health["overall"]:
        return {"status": "healthy"}
    return HTMLResponse(content="Service unhealthy", status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


@router.get("/{short_code}", include_in_schema=False)
async def redirect_to_url(request: Request, short_code: str):
    """Redirect to the original URL and record the access."""
    service = request.app.state.service

    is_valid, error = is_valid_short_code(short_code, check_reserved=False)
    if not is_valid:
        return _error_page(request, f"Invalid short code: {error}", 400)

    original_url = await service.get_original_url(
        short_code,
        client_ip=getattr(request.state, "client_ip", None),
        user_agent=request.headers.get("user-agent"),
    )

    if not original_url:
        if await service.is_expired(short_code):
            return _error_page(request, f"Short URL '{short_code}' has expired", 410)
        return _error_page(request, f"Short code '{short_code}' not found", 404)

    # Perform 302 redirect (temporary redirect for tracking)
    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
