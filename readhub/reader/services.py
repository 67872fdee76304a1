import logging

from .mock_data import get_fallback_articles, get_fallback_magazines
from .newsapi import NewsApiClient, RemoteUnavailable
from .stores import get_store
from .utils import matches_query

logger = logging.getLogger(__name__)

ARTICLE_SEARCH_FIELDS = ('title', 'content', 'description', 'author', 'category', 'tags')
MAGAZINE_SEARCH_FIELDS = ('title', 'description', 'publisher', 'category')


class ArticleService:
    """
    Article operations: try NewsAPI first, fall back to the local store.

    Args:
        store: RecordStore holding Article records
        client: NewsApiClient; remote calls are only made when it is configured
    """

    def __init__(self, store, client):
        self.store = store
        self.client = client

    def list_all(self):
        return self.store.all()

    def favorites(self):
        return self.store.favorites()

    def ensure_seeded(self):
        """Seed an empty store with the fallback set. Returns True if it seeded."""
        if not self.store.add_all_if_empty(get_fallback_articles()):
            return False
        logger.info("Seeded article store with fallback set")
        return True

    def toggle_favorite(self, pk):
        is_favorite = self.store.toggle_favorite(pk)
        logger.info("Toggled favorite for article %s: %s", pk, is_favorite)
        return is_favorite

    def local_search(self, query):
        """Case-insensitive substring match over the stored articles."""
        query = (query or '').strip()
        if not query:
            return []
        return [a for a in self.store.all() if matches_query(a, query, ARTICLE_SEARCH_FIELDS)]

    def search(self, query):
        """
        Search articles for a query.

        Delegates to NewsAPI when a key is configured; any remote failure
        degrades to the local substring search. An empty query matches
        nothing on either path.
        """
        query = (query or '').strip()
        if not query:
            return []

        if not self.client.is_configured:
            logger.info("NewsAPI key not set, using local search for %r", query)
            return self.local_search(query)

        try:
            return self.client.search(query)
        except RemoteUnavailable as e:
            logger.warning("NewsAPI search failed (%s), using local search for %r", e, query)
        except Exception:
            logger.exception("Unexpected error searching NewsAPI for %r", query)
        return self.local_search(query)

    def fetch_and_merge(self):
        """
        Fetch top headlines and append them to the store.

        Returns:
            list: the stored headlines, or the fallback set when no key is
            configured or the fetch fails
        """
        if not self.client.is_configured:
            logger.info("NewsAPI key not set, using fallback articles")
            fallback = get_fallback_articles()
            self.store.add_all_if_empty(fallback)
            return fallback

        try:
            headlines = self.client.top_headlines()
        except RemoteUnavailable as e:
            logger.warning("NewsAPI headlines failed (%s), using fallback articles", e)
            return get_fallback_articles()
        except Exception:
            logger.exception("Unexpected error fetching NewsAPI headlines")
            return get_fallback_articles()

        stored = self.store.add_all(headlines)
        logger.info("Merged %d headlines into the article store", len(stored))
        return stored

    def status(self):
        return {
            'articles': self.store.count(),
            'favorites': len(self.store.favorites()),
            'apiKeySet': self.client.is_configured,
        }


class MagazineService:
    """Magazine operations over the local store; magazines have no remote source."""

    def __init__(self, store):
        self.store = store

    def list_all(self):
        return self.store.all()

    def favorites(self):
        return self.store.favorites()

    def ensure_seeded(self, article_ids=None):
        if not self.store.add_all_if_empty(get_fallback_magazines(article_ids)):
            return False
        logger.info("Seeded magazine store with fallback set")
        return True

    def toggle_favorite(self, pk):
        is_favorite = self.store.toggle_favorite(pk)
        logger.info("Toggled favorite for magazine %s: %s", pk, is_favorite)
        return is_favorite

    def search(self, query):
        query = (query or '').strip()
        if not query:
            return []
        return [m for m in self.store.all() if matches_query(m, query, MAGAZINE_SEARCH_FIELDS)]

    def status(self):
        return {
            'magazines': self.store.count(),
            'favorites': len(self.store.favorites()),
        }


def get_article_service():
    return ArticleService(get_store('articles'), NewsApiClient.from_settings())


def get_magazine_service():
    return MagazineService(get_store('magazines'))
