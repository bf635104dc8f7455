import logging
from urllib.parse import urlsplit

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}


def _same_site(url: str, host: str, allowed_origins: list[str]) -> bool:
    parts = urlsplit(url)
    origin = f"{parts.scheme}://{parts.netloc}"
    return parts.netloc == host or origin in allowed_origins


async def csrf_middleware(request: Request, call_next):
    """Refuse state-changing requests whose Origin or Referer points elsewhere.

    Requests without either header pass; development skips the check.
    """
    settings = request.app.state.settings
    if request.method in SAFE_METHODS or settings.is_development:
        return await call_next(request)

    host = request.headers.get("host", "")
    origin = request.headers.get("origin")
    referer = request.headers.get("referer")
    for value in (origin, referer):
        if value and not _same_site(value, host, settings.cors_origins):
            logger.warning(
                "CSRF check failed: origin=%s referer=%s host=%s", origin, referer, host
            )
            return JSONResponse(
                status_code=status.HTTP_403_FORBIDDEN,
                content={"detail": "CSRF check failed"},
            )
    return await call_next(request)
