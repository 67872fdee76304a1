import logging

import requests
from django.conf import settings

from .models import Article, NO_CONTENT
from .utils import parse_published_at, strip_markup

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "demo_key"
DEFAULT_BASE_URL = "https://newsapi.org/v2"
DEFAULT_HOMEPAGE = "https://newsapi.org/"
DEFAULT_TIMEOUT_SECONDS = 10

DEFAULT_TITLE = "No Title"
DEFAULT_AUTHOR = "Unknown Author"
DEFAULT_DESCRIPTION = "No description"
DEFAULT_SOURCE = "Unknown Source"

HEADLINES_CATEGORY = "general"
SEARCH_CATEGORY = "search"

REQUEST_HEADERS = {
    "User-Agent": "ReadHub/1.0",
    "Accept": "application/json",
}


class RemoteUnavailable(Exception):
    """The news API could not be reached or returned an unusable response."""


def _text(record, key, default):
    value = record.get(key)
    if value is None:
        return default
    return value


def normalize_article(record, category, tags=None, homepage=DEFAULT_HOMEPAGE):
    """
    Map one NewsAPI article record onto an unsaved Article.

    Args:
        record: dict from the 'articles' array of a NewsAPI response
        category: category to force on the article
        tags: tag list to attach (empty for headlines)
        homepage: URL used when the record has none

    Returns:
        Article: unsaved model instance
    """
    source = record.get('source') or {}
    source_name = source.get('name') if isinstance(source, dict) else None

    return Article(
        title=_text(record, 'title', DEFAULT_TITLE),
        content=_text(record, 'content', NO_CONTENT),
        author=_text(record, 'author', DEFAULT_AUTHOR),
        description=strip_markup(_text(record, 'description', DEFAULT_DESCRIPTION)),
        source=source_name or DEFAULT_SOURCE,
        url=record.get('url') or homepage,
        url_to_image=record.get('urlToImage') or None,
        published_at=parse_published_at(record.get('publishedAt')),
        category=category,
        tags=list(tags or []),
        is_favorite=False,
    )


class NewsApiClient:
    """Client for the NewsAPI top-headlines and everything endpoints."""

    def __init__(self, api_key, base_url=DEFAULT_BASE_URL, homepage=DEFAULT_HOMEPAGE,
                 timeout=DEFAULT_TIMEOUT_SECONDS):
        self.api_key = (api_key or '').strip()
        self.base_url = base_url.rstrip('/')
        self.homepage = homepage
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            api_key=getattr(settings, 'NEWS_API_KEY', ''),
            base_url=getattr(settings, 'NEWS_API_BASE_URL', DEFAULT_BASE_URL),
            homepage=getattr(settings, 'NEWS_API_HOMEPAGE', DEFAULT_HOMEPAGE),
            timeout=getattr(settings, 'NEWS_API_TIMEOUT', DEFAULT_TIMEOUT_SECONDS),
        )

    @property
    def is_configured(self):
        return bool(self.api_key) and self.api_key != PLACEHOLDER_API_KEY

    def top_headlines(self):
        """
        Fetch US top headlines.

        Returns:
            list: unsaved Article instances with category 'general'

        Raises:
            RemoteUnavailable: on any transport, HTTP or payload failure
        """
        payload = self._get('top-headlines', {'country': 'us'})
        articles = self._normalize_all(payload, HEADLINES_CATEGORY, [])
        logger.info("Fetched %d articles from NewsAPI", len(articles))
        return articles

    def search(self, query):
        """
        Search all NewsAPI articles for a query, newest first.

        Returns:
            list: unsaved Article instances with category 'search' tagged with the query

        Raises:
            RemoteUnavailable: on any transport, HTTP or payload failure
        """
        payload = self._get('everything', {
            'q': query,
            'sortBy': 'publishedAt',
            'language': 'en',
        })
        articles = self._normalize_all(payload, SEARCH_CATEGORY, [query])
        logger.info("Found %d articles for %r", len(articles), query)
        return articles

    def _get(self, endpoint, params):
        if not self.is_configured:
            raise RemoteUnavailable("NewsAPI key is not configured")

        url = f"{self.base_url}/{endpoint}"
        logger.debug("GET %s params=%s", url, params)
        try:
            response = requests.get(
                url,
                params={**params, 'apiKey': self.api_key},
                headers=REQUEST_HEADERS,
                timeout=(self.timeout, self.timeout),
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            raise RemoteUnavailable(f"NewsAPI request failed: {e}") from e
        except ValueError as e:
            raise RemoteUnavailable(f"NewsAPI returned invalid JSON: {e}") from e

        if not isinstance(payload, dict) or payload.get('status') != 'ok':
            code = payload.get('code') if isinstance(payload, dict) else None
            message = payload.get('message') if isinstance(payload, dict) else None
            raise RemoteUnavailable(f"NewsAPI error: {code or 'unknown'} {message or ''}".strip())
        return payload

    def _normalize_all(self, payload, category, tags):
        articles = []
        for record in payload.get('articles') or []:
            if not isinstance(record, dict):
                logger.warning("Skipping malformed NewsAPI record: %r", record)
                continue
            articles.append(normalize_article(record, category, tags, self.homepage))
        return articles
