from __future__ import annotations

from functools import lru_cache

from dropship_branding.llm.client import CompletionClient
from dropship_branding.services.website import WebsiteFetcher


@lru_cache
def get_completion_client() -> CompletionClient:
    return CompletionClient()


def get_website_fetcher() -> WebsiteFetcher:
    return WebsiteFetcher()
