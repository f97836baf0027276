from __future__ import annotations

import asyncio
import logging
from urllib.parse import urljoin

import httpx

from dropship_branding.config import Settings, settings
from dropship_branding.errors import InputValidationError
from dropship_branding.services.html_text import html_to_text, truncate_text

logger = logging.getLogger(__name__)

CANDIDATE_PATHS = (
    "/",
    "/about",
    "/collections",
    "/products",
    "/shop",
    "/pages/about",
    "/pages/about-us",
    "/faq",
    "/contact",
)


class UpstreamFetchError(RuntimeError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Failed to fetch website content from {url}")
        self.url = url


def normalize_site_url(url: str) -> str:
    """Return the site origin (`scheme://host[:port]`), defaulting to https."""

    candidate = (url or "").strip()
    if not candidate:
        raise InputValidationError("Missing url", field="url")
    lower = candidate.lower()
    if not (lower.startswith("http://") or lower.startswith("https://")):
        candidate = f"https://{candidate}"

    if " " in candidate:
        raise InputValidationError("Invalid URL", field="url")

    # Reading `host` decodes IDNA labels, so hostnames httpx cannot request fail here.
    try:
        parsed = httpx.URL(candidate)
        hostname = parsed.host
        port = parsed.port
    except (httpx.InvalidURL, ValueError) as exc:
        raise InputValidationError("Invalid URL", field="url") from exc
    if not hostname:
        raise InputValidationError("Invalid URL", field="url")

    netloc = hostname if port is None else f"{hostname}:{port}"
    return f"{parsed.scheme.lower()}://{netloc}"


class WebsiteFetcher:
    """
    Sequentially fetches well-known pages of a site.

    Each page has its own timeout; a timeout, network error or non-2xx status
    counts as "no content" for that path. Fetching stops once `max_pages`
    bodies have been collected.
    """

    def __init__(
        self,
        config: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        candidate_paths: tuple[str, ...] = CANDIDATE_PATHS,
    ) -> None:
        self._settings = config or settings
        self._timeout = self._settings.WEBSITE_FETCH_TIMEOUT_SECONDS
        self._max_pages = self._settings.WEBSITE_FETCH_MAX_PAGES
        self._transport = transport
        self._candidate_paths = candidate_paths

    async def fetch_pages(self, origin: str) -> list[str]:
        bodies: list[str] = []
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            follow_redirects=True,
            headers={"user-agent": self._settings.WEBSITE_USER_AGENT},
        ) as client:
            for path in self._candidate_paths:
                page_url = urljoin(f"{origin}/", path.lstrip("/"))
                body = await self._fetch_page(client, page_url)
                if body:
                    bodies.append(body)
                if len(bodies) >= self._max_pages:
                    break

        logger.info(
            "Fetched website pages",
            extra={"origin": origin, "pages_fetched": len(bodies)},
        )
        return bodies

    async def _fetch_page(self, client: httpx.AsyncClient, page_url: str) -> str | None:
        try:
            response = await asyncio.wait_for(client.get(page_url), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.info("Website page fetch timed out", extra={"url": page_url})
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.info("Website page fetch failed", extra={"url": page_url, "error": str(exc)})
            return None

        if not response.is_success:
            logger.debug(
                "Website page returned non-success status",
                extra={"url": page_url, "status_code": response.status_code},
            )
            return None
        return response.text

    async def fetch_site_text(self, url: str) -> tuple[str, str]:
        """Return `(origin, text)` where text is stripped of markup and truncated."""

        origin = normalize_site_url(url)
        bodies = await self.fetch_pages(origin)
        if not bodies:
            raise UpstreamFetchError(origin)

        text = html_to_text("\n\n".join(bodies))
        return origin, truncate_text(text, self._settings.WEBSITE_TEXT_MAX_CHARS)
