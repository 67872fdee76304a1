"""
Test suite for the reader app.

Tests cover:
- NewsAPI record normalization and timestamp parsing
- NewsAPI client (requests mocked)
- Memory and database stores
- Article and magazine services, including remote fallback
- Django views
- Models and management commands
"""
import threading
from datetime import datetime, timedelta, timezone as dt_timezone
from io import StringIO
from unittest.mock import patch, MagicMock

import requests
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.test import TestCase, Client, override_settings
from django.utils import timezone

from .mock_data import FALLBACK_ARTICLES, FALLBACK_MAGAZINES, get_fallback_articles
from .models import Article, Magazine
from .newsapi import NewsApiClient, RemoteUnavailable, normalize_article
from .services import ArticleService, MagazineService
from .stores import DatabaseStore, MemoryStore, NotFound, get_store, reset_memory_stores
from .utils import parse_published_at, strip_markup


def make_article(title, published_at=None, **kwargs):
    defaults = {
        'content': f'{title} content',
        'author': 'Test Author',
        'description': f'{title} description',
        'source': 'Test Source',
        'url': 'https://example.com/article',
        'category': 'Technology',
        'tags': [],
    }
    defaults.update(kwargs)
    return Article(title=title, published_at=published_at or timezone.now(), **defaults)


def make_magazine(title, issue_number=1, **kwargs):
    defaults = {
        'publisher': 'Test Publisher',
        'description': f'{title} description',
        'publication_date': timezone.now(),
        'category': 'Technology',
    }
    defaults.update(kwargs)
    return Magazine(title=title, issue_number=issue_number, **defaults)


def make_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


def newsapi_payload(*records):
    return {'status': 'ok', 'totalResults': len(records), 'articles': list(records)}


REMOTE_RECORD = {
    'source': {'id': None, 'name': 'The Verge'},
    'author': 'Jane Reporter',
    'title': 'Remote Headline',
    'description': 'Remote description',
    'url': 'https://example.com/remote',
    'urlToImage': 'https://example.com/remote.jpg',
    'publishedAt': '2024-06-15T14:30:00Z',
    'content': 'Remote content',
}


# =============================================================================
# NORMALIZATION TESTS
# =============================================================================

class NormalizeArticleTests(TestCase):
    """Test mapping NewsAPI records onto Article."""

    def test_full_record(self):
        """Should copy every field from a complete record."""
        article = normalize_article(REMOTE_RECORD, 'general')

        self.assertIsNone(article.pk)
        self.assertEqual(article.title, 'Remote Headline')
        self.assertEqual(article.author, 'Jane Reporter')
        self.assertEqual(article.description, 'Remote description')
        self.assertEqual(article.content, 'Remote content')
        self.assertEqual(article.source, 'The Verge')
        self.assertEqual(article.url, 'https://example.com/remote')
        self.assertEqual(article.url_to_image, 'https://example.com/remote.jpg')
        self.assertEqual(article.published_at, datetime(2024, 6, 15, 14, 30, tzinfo=dt_timezone.utc))
        self.assertEqual(article.category, 'general')
        self.assertEqual(article.tags, [])
        self.assertFalse(article.is_favorite)

    def test_missing_fields_get_defaults(self):
        """Missing title/author/description/content get the exact default strings."""
        article = normalize_article({'url': 'https://example.com/x'}, 'general')

        self.assertEqual(article.title, 'No Title')
        self.assertEqual(article.author, 'Unknown Author')
        self.assertEqual(article.description, 'No description')
        self.assertEqual(article.content, 'No content available')
        self.assertEqual(article.source, 'Unknown Source')

    def test_null_fields_get_defaults(self):
        """Explicit nulls count as missing."""
        record = {key: None for key in REMOTE_RECORD}
        article = normalize_article(record, 'general')

        self.assertEqual(article.title, 'No Title')
        self.assertEqual(article.author, 'Unknown Author')
        self.assertEqual(article.description, 'No description')
        self.assertEqual(article.content, 'No content available')
        self.assertEqual(article.url, 'https://newsapi.org/')
        self.assertIsNone(article.url_to_image)

    def test_missing_url_uses_homepage(self):
        """Should fall back to the configured homepage."""
        article = normalize_article({}, 'general', homepage='https://readhub.example/')
        self.assertEqual(article.url, 'https://readhub.example/')

    def test_search_category_and_tags(self):
        """Search results are categorised 'search' and tagged with the query."""
        article = normalize_article(REMOTE_RECORD, 'search', ['kotlin'])
        self.assertEqual(article.category, 'search')
        self.assertEqual(article.tags, ['kotlin'])

    def test_html_stripped_from_description(self):
        """Markup in descriptions should be reduced to text."""
        record = dict(REMOTE_RECORD, description='<p>Hello <b>world</b></p>')
        article = normalize_article(record, 'general')
        self.assertEqual(article.description, 'Hello world')

    def test_angle_bracket_titles_kept(self):
        """Text that only looks like a tag is not markup."""
        for title in ('Rust Vec<T> gets faster', 'Include <vector> in C++ code'):
            with self.subTest(title=title):
                article = normalize_article(dict(REMOTE_RECORD, title=title), 'general')
                self.assertEqual(article.title, title)

    def test_angle_bracket_description_kept(self):
        record = dict(REMOTE_RECORD, description='Include <vector> in C++ code &amp; more')
        article = normalize_article(record, 'general')
        self.assertEqual(article.description, 'Include <vector> in C++ code &amp; more')

    def test_content_passed_through_unchanged(self):
        """Content keeps its newlines and any inline markup as sent."""
        content = 'Line one\n\nLine two <b>bold</b>'
        article = normalize_article(dict(REMOTE_RECORD, content=content), 'general')
        self.assertEqual(article.content, content)

    def test_present_text_fields_unchanged(self):
        record = dict(REMOTE_RECORD, title='  Spaced   title ', author='A &amp; B')
        article = normalize_article(record, 'general')
        self.assertEqual(article.title, '  Spaced   title ')
        self.assertEqual(article.author, 'A &amp; B')

    def test_missing_published_at_uses_now(self):
        """Absent timestamps default to the current time."""
        before = timezone.now()
        article = normalize_article({}, 'general')
        after = timezone.now()
        self.assertTrue(before <= article.published_at <= after)


class ParsePublishedAtTests(TestCase):
    """Test NewsAPI timestamp parsing."""

    def test_utc_designator_stripped(self):
        result = parse_published_at('2024-01-15T10:30:00Z')
        self.assertEqual(result, datetime(2024, 1, 15, 10, 30, tzinfo=dt_timezone.utc))

    def test_fractional_seconds(self):
        result = parse_published_at('2024-01-15T10:30:00.123Z')
        self.assertEqual(result.year, 2024)
        self.assertEqual(result.microsecond, 123000)
        self.assertFalse(timezone.is_naive(result))

    def test_explicit_offset_kept(self):
        result = parse_published_at('2024-01-15T10:30:00+02:00')
        self.assertEqual(result, datetime(2024, 1, 15, 8, 30, tzinfo=dt_timezone.utc))

    def test_malformed_uses_now(self):
        before = timezone.now()
        result = parse_published_at('not a date')
        after = timezone.now()
        self.assertTrue(before <= result <= after)

    def test_none_uses_now(self):
        before = timezone.now()
        result = parse_published_at(None)
        self.assertTrue(before <= result <= timezone.now())

    def test_non_string_uses_now(self):
        before = timezone.now()
        result = parse_published_at(12345)
        self.assertTrue(before <= result <= timezone.now())


class StripMarkupTests(TestCase):
    """Test description markup removal."""

    def test_plain_text_unchanged(self):
        self.assertEqual(strip_markup('  Hello \n  world  '), '  Hello \n  world  ')

    def test_markup_removed(self):
        self.assertEqual(strip_markup('<ul><li>One</li><li>Two</li></ul>'), 'One Two')

    def test_unknown_tags_left_alone(self):
        self.assertEqual(strip_markup('Rust Vec<T> and <vector>'), 'Rust Vec<T> and <vector>')

    def test_non_string_unchanged(self):
        self.assertIsNone(strip_markup(None))


# =============================================================================
# NEWSAPI CLIENT TESTS
# =============================================================================

class NewsApiClientTests(TestCase):
    """Test the NewsAPI client with requests mocked."""

    def test_is_configured(self):
        """Blank, missing and placeholder keys are not configured."""
        self.assertFalse(NewsApiClient('').is_configured)
        self.assertFalse(NewsApiClient(None).is_configured)
        self.assertFalse(NewsApiClient('   ').is_configured)
        self.assertFalse(NewsApiClient('demo_key').is_configured)
        self.assertTrue(NewsApiClient('real-key').is_configured)

    @patch('reader.newsapi.requests.get')
    def test_unconfigured_never_calls_out(self, mock_get):
        """Should raise without any HTTP call when no key is set."""
        client = NewsApiClient('demo_key')

        with self.assertRaises(RemoteUnavailable):
            client.top_headlines()
        with self.assertRaises(RemoteUnavailable):
            client.search('kotlin')

        mock_get.assert_not_called()

    @patch('reader.newsapi.requests.get')
    def test_top_headlines_request(self, mock_get):
        """Should request US top headlines with timeouts."""
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD))

        articles = NewsApiClient('test-key').top_headlines()

        mock_get.assert_called_once()
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], 'https://newsapi.org/v2/top-headlines')
        self.assertEqual(kwargs['params'], {'country': 'us', 'apiKey': 'test-key'})
        self.assertEqual(kwargs['timeout'], (10, 10))
        self.assertEqual(kwargs['headers']['User-Agent'], 'ReadHub/1.0')
        self.assertEqual(len(articles), 1)
        self.assertEqual(articles[0].category, 'general')
        self.assertEqual(articles[0].tags, [])

    @patch('reader.newsapi.requests.get')
    def test_search_request(self, mock_get):
        """Should query the everything endpoint sorted by publication date."""
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD, REMOTE_RECORD))

        articles = NewsApiClient('test-key').search('kotlin')

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], 'https://newsapi.org/v2/everything')
        self.assertEqual(kwargs['params'], {
            'q': 'kotlin',
            'sortBy': 'publishedAt',
            'language': 'en',
            'apiKey': 'test-key',
        })
        self.assertEqual(len(articles), 2)
        self.assertTrue(all(a.category == 'search' for a in articles))
        self.assertTrue(all(a.tags == ['kotlin'] for a in articles))

    @patch('reader.newsapi.requests.get')
    def test_custom_base_url_and_timeout(self, mock_get):
        mock_get.return_value = make_response(newsapi_payload())

        NewsApiClient('test-key', base_url='http://localhost:9000/v2/', timeout=3).top_headlines()

        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], 'http://localhost:9000/v2/top-headlines')
        self.assertEqual(kwargs['timeout'], (3, 3))

    @override_settings(NEWS_API_KEY='settings-key', NEWS_API_TIMEOUT=5)
    def test_from_settings(self):
        client = NewsApiClient.from_settings()
        self.assertEqual(client.api_key, 'settings-key')
        self.assertEqual(client.timeout, 5)
        self.assertTrue(client.is_configured)

    @patch('reader.newsapi.requests.get')
    def test_error_status_raises(self, mock_get):
        """A status other than 'ok' is a failure."""
        mock_get.return_value = make_response({
            'status': 'error',
            'code': 'apiKeyInvalid',
            'message': 'Your API key is invalid.',
        })

        with self.assertRaises(RemoteUnavailable) as ctx:
            NewsApiClient('test-key').top_headlines()
        self.assertIn('apiKeyInvalid', str(ctx.exception))

    @patch('reader.newsapi.requests.get')
    def test_http_error_raises(self, mock_get):
        """4xx/5xx responses are failures."""
        response = make_response({})
        response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
        mock_get.return_value = response

        with self.assertRaises(RemoteUnavailable):
            NewsApiClient('test-key').top_headlines()

    @patch('reader.newsapi.requests.get')
    def test_timeout_raises(self, mock_get):
        mock_get.side_effect = requests.Timeout("timed out")

        with self.assertRaises(RemoteUnavailable):
            NewsApiClient('test-key').search('kotlin')

    @patch('reader.newsapi.requests.get')
    def test_connection_error_raises(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("Connection Error")

        with self.assertRaises(RemoteUnavailable):
            NewsApiClient('test-key').top_headlines()

    @patch('reader.newsapi.requests.get')
    def test_invalid_json_raises(self, mock_get):
        response = make_response(None)
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with self.assertRaises(RemoteUnavailable):
            NewsApiClient('test-key').top_headlines()

    @patch('reader.newsapi.requests.get')
    def test_skips_malformed_records(self, mock_get):
        """Non-object entries in the articles array are skipped."""
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD, 'garbage', None))

        articles = NewsApiClient('test-key').top_headlines()

        self.assertEqual(len(articles), 1)

    @patch('reader.newsapi.requests.get')
    def test_missing_articles_array(self, mock_get):
        mock_get.return_value = make_response({'status': 'ok', 'totalResults': 0})

        self.assertEqual(NewsApiClient('test-key').top_headlines(), [])


# =============================================================================
# STORE TESTS
# =============================================================================

class StoreContractMixin:
    """Behaviour shared by every RecordStore implementation."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_add_assigns_ids(self):
        first = self.store.add(make_article('First'))
        second = self.store.add(make_article('Second'))
        self.assertIsNotNone(first.pk)
        self.assertNotEqual(first.pk, second.pk)
        self.assertEqual(self.store.count(), 2)

    def test_get(self):
        article = self.store.add(make_article('Lookup'))
        self.assertEqual(self.store.get(article.pk).title, 'Lookup')

    def test_get_unknown_raises(self):
        with self.assertRaises(NotFound):
            self.store.get(9999)

    def test_all_sorted_newest_first(self):
        """Output order follows the timestamp regardless of insertion order."""
        now = timezone.now()
        self.store.add(make_article('T2', now - timedelta(hours=1)))
        self.store.add(make_article('T3', now - timedelta(hours=2)))
        self.store.add(make_article('T1', now))

        self.assertEqual([a.title for a in self.store.all()], ['T1', 'T2', 'T3'])

    def test_ties_keep_insertion_order(self):
        now = timezone.now()
        for title in ('A', 'B', 'C'):
            self.store.add(make_article(title, now))

        self.assertEqual([a.title for a in self.store.all()], ['A', 'B', 'C'])

    def test_toggle_favorite_twice_restores_flag(self):
        article = self.store.add(make_article('Fav'))

        self.assertTrue(self.store.toggle_favorite(article.pk))
        self.assertTrue(self.store.get(article.pk).is_favorite)
        self.assertFalse(self.store.toggle_favorite(article.pk))
        self.assertFalse(self.store.get(article.pk).is_favorite)

    def test_toggle_unknown_raises(self):
        with self.assertRaises(NotFound):
            self.store.toggle_favorite(9999)

    def test_favorites(self):
        now = timezone.now()
        older = self.store.add(make_article('Older', now - timedelta(days=1)))
        self.store.add(make_article('Plain', now))
        newer = self.store.add(make_article('Newer', now))
        self.store.toggle_favorite(older.pk)
        self.store.toggle_favorite(newer.pk)

        self.assertEqual([a.title for a in self.store.favorites()], ['Newer', 'Older'])

    def test_clear(self):
        self.store.add_all([make_article('One'), make_article('Two')])
        self.store.clear()
        self.assertEqual(self.store.count(), 0)
        self.assertEqual(self.store.all(), [])

    def test_add_all_if_empty(self):
        stored = self.store.add_all_if_empty([make_article('One'), make_article('Two')])
        self.assertEqual([a.title for a in stored], ['One', 'Two'])
        self.assertTrue(all(a.pk is not None for a in stored))

        self.assertEqual(self.store.add_all_if_empty([make_article('Three')]), [])
        self.assertEqual(self.store.count(), 2)

    def test_magazine_validation(self):
        """Stores built with validate=True reject an issue number below 1."""
        store = self.make_magazine_store()
        with self.assertRaises(ValidationError):
            store.add(make_magazine('Bad issue', issue_number=0))
        self.assertEqual(store.count(), 0)

        store.add(make_magazine('Good issue', issue_number=1))
        self.assertEqual(store.count(), 1)


class MemoryStoreTests(StoreContractMixin, TestCase):
    """Test the in-process store."""

    def make_store(self):
        return MemoryStore(Article, 'published_at')

    def make_magazine_store(self):
        return MemoryStore(Magazine, 'publication_date', validate=True)

    def test_records_not_written_to_database(self):
        self.store.add(make_article('Memory only'))
        self.assertEqual(Article.objects.count(), 0)

    def test_get_accepts_string_id(self):
        article = self.store.add(make_article('String id'))
        self.assertEqual(self.store.get(str(article.pk)).title, 'String id')

    def test_concurrent_add_all_if_empty_seeds_once(self):
        barrier = threading.Barrier(8)

        def seed():
            barrier.wait()
            self.store.add_all_if_empty(get_fallback_articles())

        threads = [threading.Thread(target=seed) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(self.store.count(), len(FALLBACK_ARTICLES))


class DatabaseStoreTests(StoreContractMixin, TestCase):
    """Test the ORM-backed store."""

    def make_store(self):
        return DatabaseStore(Article, 'published_at')

    def make_magazine_store(self):
        return DatabaseStore(Magazine, 'publication_date', validate=True)

    def test_toggle_persists(self):
        article = self.store.add(make_article('Persisted'))
        self.store.toggle_favorite(article.pk)
        article.refresh_from_db()
        self.assertTrue(article.is_favorite)

    def test_magazine_store_orders_by_publication_date(self):
        store = DatabaseStore(Magazine, 'publication_date')
        now = timezone.now()
        for title, age in (('Old', 10), ('New', 1), ('Mid', 5)):
            store.add(Magazine(
                title=title, publisher='Pub', description='', issue_number=1,
                publication_date=now - timedelta(days=age), category='Tech',
            ))

        self.assertEqual([m.title for m in store.all()], ['New', 'Mid', 'Old'])


class GetStoreTests(TestCase):
    """Test store selection from settings."""

    def setUp(self):
        reset_memory_stores()

    def tearDown(self):
        reset_memory_stores()

    def test_database_is_default(self):
        self.assertIsInstance(get_store('articles'), DatabaseStore)

    @override_settings(READHUB_STORE='memory')
    def test_memory_store_is_seeded_singleton(self):
        store = get_store('articles')
        self.assertIsInstance(store, MemoryStore)
        self.assertIs(get_store('articles'), store)
        self.assertEqual(store.count(), len(FALLBACK_ARTICLES))
        self.assertEqual(get_store('magazines').count(), len(FALLBACK_MAGAZINES))

    @override_settings(READHUB_STORE='memory')
    def test_memory_magazine_lists_seeded_articles(self):
        article_pks = [a.pk for a in get_store('articles').all()]
        magazine = next(m for m in get_store('magazines').all() if m.title == 'Developer Weekly')
        self.assertEqual(sorted(magazine.article_ids), sorted(article_pks))

    def test_database_magazine_store_validates(self):
        with self.assertRaises(ValidationError):
            get_store('magazines').add(make_magazine('Bad issue', issue_number=0))
        self.assertEqual(Magazine.objects.count(), 0)

    @override_settings(READHUB_STORE='redis')
    def test_unknown_backend_raises(self):
        with self.assertRaises(ValueError):
            get_store('articles')


# =============================================================================
# ARTICLE SERVICE TESTS
# =============================================================================

class ArticleServiceTests(TestCase):
    """Test remote-first article operations with local fallback."""

    def setUp(self):
        self.store = DatabaseStore(Article, 'published_at')
        self.offline = ArticleService(self.store, NewsApiClient('demo_key'))
        self.online = ArticleService(self.store, NewsApiClient('test-key'))

    def fallback_titles(self):
        return [a['title'] for a in FALLBACK_ARTICLES]

    @patch('reader.newsapi.requests.get')
    def test_fetch_without_key_returns_fallback(self, mock_get):
        """No key: zero HTTP calls and exactly the fallback set."""
        result = self.offline.fetch_and_merge()

        mock_get.assert_not_called()
        self.assertEqual([a.title for a in result], self.fallback_titles())

    @patch('reader.newsapi.requests.get')
    def test_fetch_without_key_seeds_empty_store(self, mock_get):
        self.offline.fetch_and_merge()
        self.assertEqual(self.store.count(), len(FALLBACK_ARTICLES))

        # Second call leaves the store alone
        self.offline.fetch_and_merge()
        self.assertEqual(self.store.count(), len(FALLBACK_ARTICLES))
        mock_get.assert_not_called()

    @patch('reader.newsapi.requests.get')
    def test_fetch_appends_without_dedup(self, mock_get):
        """Successful fetches append every headline, duplicates included."""
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD))

        first = self.online.fetch_and_merge()
        self.online.fetch_and_merge()

        self.assertEqual(len(first), 1)
        self.assertIsNotNone(first[0].pk)
        self.assertEqual(Article.objects.filter(title='Remote Headline').count(), 2)

    @patch('reader.newsapi.requests.get')
    def test_fetch_failure_returns_fallback(self, mock_get):
        """Remote failures are recovered with the fallback set."""
        mock_get.side_effect = requests.Timeout("timed out")

        result = self.online.fetch_and_merge()

        self.assertEqual([a.title for a in result], self.fallback_titles())
        self.assertEqual(self.store.count(), 0)

    @patch('reader.newsapi.requests.get')
    def test_search_empty_query_returns_nothing(self, mock_get):
        """Empty queries match nothing on both paths."""
        self.online.ensure_seeded()

        self.assertEqual(self.online.search(''), [])
        self.assertEqual(self.online.search('   '), [])
        self.assertEqual(self.offline.search(''), [])
        self.assertEqual(self.offline.search(None), [])
        mock_get.assert_not_called()

    @patch('reader.newsapi.requests.get')
    def test_search_uses_remote_when_configured(self, mock_get):
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD))
        self.online.ensure_seeded()

        result = self.online.search('kotlin')

        self.assertEqual([a.title for a in result], ['Remote Headline'])
        self.assertEqual(result[0].tags, ['kotlin'])
        # Search results are not stored
        self.assertEqual(self.store.count(), len(FALLBACK_ARTICLES))

    @patch('reader.newsapi.requests.get')
    def test_search_timeout_matches_local_search(self, mock_get):
        """A remote timeout yields the local substring search over stored articles."""
        mock_get.side_effect = requests.Timeout("timed out")
        self.online.ensure_seeded()

        result = self.online.search('kotlin')

        self.assertEqual(result, self.online.local_search('kotlin'))
        self.assertEqual([a.title for a in result], ['Kotlin 1.9 Introduces Powerful New Features'])

    def test_search_unexpected_error_falls_back(self):
        client = MagicMock()
        client.is_configured = True
        client.search.side_effect = KeyError('articles')
        service = ArticleService(self.store, client)
        service.ensure_seeded()

        self.assertEqual(len(service.search('mongodb')), 1)

    @patch('reader.newsapi.requests.get')
    def test_offline_search_is_local(self, mock_get):
        self.offline.ensure_seeded()

        self.assertEqual(len(self.offline.search('KOTLIN')), 1)
        mock_get.assert_not_called()

    def test_local_search_fields(self):
        """Any of title, content, description, author, category or tags qualifies."""
        now = timezone.now()
        self.store.add_all([
            make_article('By title: Python', now),
            make_article('By content', now, content='all about python'),
            make_article('By description', now, description='Python tips'),
            make_article('By author', now, author='Python Team'),
            make_article('By category', now, category='python'),
            make_article('By tag', now, tags=['web', 'Python']),
            make_article('Unrelated', now),
        ])

        result = self.offline.local_search('python')

        self.assertEqual(len(result), 6)
        self.assertNotIn('Unrelated', [a.title for a in result])

    def test_list_all_sorted(self):
        now = timezone.now()
        self.store.add(make_article('T3', now - timedelta(days=2)))
        self.store.add(make_article('T1', now))
        self.store.add(make_article('T2', now - timedelta(days=1)))

        self.assertEqual([a.title for a in self.offline.list_all()], ['T1', 'T2', 'T3'])

    def test_toggle_favorite_pair(self):
        article = self.store.add(make_article('Toggle'))

        self.offline.toggle_favorite(article.pk)
        self.offline.toggle_favorite(article.pk)

        self.assertFalse(self.store.get(article.pk).is_favorite)

    def test_toggle_unknown_raises(self):
        with self.assertRaises(NotFound):
            self.offline.toggle_favorite(12345)

    def test_favorites(self):
        article = self.store.add(make_article('Liked'))
        self.store.add(make_article('Ignored'))
        self.offline.toggle_favorite(article.pk)

        self.assertEqual([a.title for a in self.offline.favorites()], ['Liked'])

    def test_ensure_seeded_only_once(self):
        self.assertTrue(self.offline.ensure_seeded())
        self.assertFalse(self.offline.ensure_seeded())
        self.assertEqual(self.store.count(), len(FALLBACK_ARTICLES))

    def test_status(self):
        self.offline.ensure_seeded()
        self.assertEqual(self.offline.status(), {
            'articles': len(FALLBACK_ARTICLES),
            'favorites': 0,
            'apiKeySet': False,
        })
        self.assertTrue(self.online.status()['apiKeySet'])


class MagazineServiceTests(TestCase):
    """Test local-only magazine operations."""

    def setUp(self):
        self.service = MagazineService(DatabaseStore(Magazine, 'publication_date'))
        self.service.ensure_seeded()

    def test_seeded_in_date_order(self):
        titles = [m.title for m in self.service.list_all()]
        self.assertEqual(titles, ['Developer Weekly', 'Tech Insights', 'AI Today'])

    def test_search_by_publisher(self):
        result = self.service.search('future publications')
        self.assertEqual([m.title for m in result], ['AI Today'])

    def test_search_empty_query(self):
        self.assertEqual(self.service.search(''), [])

    def test_toggle_favorite(self):
        magazine = self.service.list_all()[0]
        self.assertTrue(self.service.toggle_favorite(magazine.pk))
        self.assertEqual([m.pk for m in self.service.favorites()], [magazine.pk])

    def test_ensure_seeded_only_once(self):
        self.assertFalse(self.service.ensure_seeded())
        self.assertEqual(len(self.service.list_all()), len(FALLBACK_MAGAZINES))


# =============================================================================
# VIEW TESTS
# =============================================================================

@override_settings(NEWS_API_KEY='demo_key', READHUB_STORE='database')
class ViewTests(TestCase):
    """Test Django view endpoints."""

    def setUp(self):
        call_command('populate_sample_data', stdout=StringIO())
        self.client = Client()

    def test_home_returns_200(self):
        """Home page renders the newest articles and magazines."""
        response = self.client.get('/')
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'reader/index.html')
        self.assertEqual(Article.objects.count(), len(FALLBACK_ARTICLES))
        self.assertEqual(Magazine.objects.count(), len(FALLBACK_MAGAZINES))
        self.assertLessEqual(len(response.context['articles']), 6)
        self.assertLessEqual(len(response.context['magazines']), 3)

    def test_seeded_magazine_lists_articles(self):
        magazine = Magazine.objects.get(title='Developer Weekly')
        self.assertEqual(sorted(magazine.article_ids), sorted(Article.objects.values_list('pk', flat=True)))

    def test_articles_page(self):
        response = self.client.get('/articles/')
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'reader/articles.html')
        self.assertContains(response, 'Kotlin 1.9 Introduces Powerful New Features')

    def test_blank_content_displays_description(self):
        response = self.client.get('/articles/')
        self.assertContains(response, 'Artificial intelligence is transforming how we write code.')

    def test_magazines_page(self):
        response = self.client.get('/magazines/')
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Developer Weekly')

    def test_search(self):
        response = self.client.get('/search/', {'query': 'kotlin'})
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'reader/search_results.html')
        self.assertEqual(len(response.context['articles']), 1)
        self.assertFalse(response.context['no_results'])

    def test_search_without_query(self):
        response = self.client.get('/search/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['articles'], [])
        self.assertTrue(response.context['no_results'])

    def test_search_no_matches(self):
        response = self.client.get('/search/', {'query': 'zzzz-nothing'})
        self.assertTrue(response.context['no_results'])
        self.assertContains(response, 'No results found.')

    def test_toggle_article_favorite(self):
        article = Article.objects.first()

        response = self.client.post(f'/articles/{article.pk}/favorite/')

        self.assertRedirects(response, '/articles/')
        article.refresh_from_db()
        self.assertTrue(article.is_favorite)

    def test_toggle_magazine_favorite(self):
        magazine = Magazine.objects.first()

        response = self.client.post(f'/magazines/{magazine.pk}/favorite/')

        self.assertRedirects(response, '/magazines/')
        magazine.refresh_from_db()
        self.assertTrue(magazine.is_favorite)

    def test_toggle_unknown_returns_404(self):
        response = self.client.post('/articles/99999/favorite/')
        self.assertEqual(response.status_code, 404)

    def test_toggle_get_method_returns_405(self):
        response = self.client.get('/articles/1/favorite/')
        self.assertEqual(response.status_code, 405)

    def test_favorites_page(self):
        article = Article.objects.first()
        self.client.post(f'/articles/{article.pk}/favorite/')

        response = self.client.get('/favorites/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual([a.pk for a in response.context['favorite_articles']], [article.pk])
        self.assertEqual(response.context['favorite_magazines'], [])

    @patch('reader.newsapi.requests.get')
    def test_fetch_articles_without_key(self, mock_get):
        """Fetching with no key makes no HTTP call."""
        response = self.client.post('/fetch-articles/')

        self.assertRedirects(response, '/articles/')
        mock_get.assert_not_called()
        self.assertEqual(Article.objects.count(), len(FALLBACK_ARTICLES))

    @override_settings(NEWS_API_KEY='test-key')
    @patch('reader.newsapi.requests.get')
    def test_fetch_articles_with_key(self, mock_get):
        mock_get.return_value = make_response(newsapi_payload(REMOTE_RECORD))

        self.client.post('/fetch-articles/')

        self.assertTrue(Article.objects.filter(title='Remote Headline', category='general').exists())

    def test_fetch_articles_get_method_returns_405(self):
        response = self.client.get('/fetch-articles/')
        self.assertEqual(response.status_code, 405)

    def test_debug_articles(self):
        response = self.client.get('/api/debug/articles/')
        data = response.json()
        self.assertEqual(len(data), len(FALLBACK_ARTICLES))
        self.assertIn('isFavorite', data[0])
        self.assertIn('publishedAt', data[0])

    def test_debug_status(self):
        response = self.client.get('/api/debug/status/')
        self.assertEqual(response.json(), {
            'articles': len(FALLBACK_ARTICLES),
            'magazines': len(FALLBACK_MAGAZINES),
            'apiKeySet': False,
        })


@override_settings(NEWS_API_KEY='demo_key', READHUB_STORE='database')
class EmptyStoreViewTests(TestCase):
    """Page views read the stores as they are and never seed them."""

    def test_home_does_not_seed(self):
        response = self.client.get('/')
        self.client.get('/articles/')
        self.client.get('/magazines/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['articles'], [])
        self.assertEqual(Article.objects.count(), 0)
        self.assertEqual(Magazine.objects.count(), 0)


# =============================================================================
# MODEL TESTS
# =============================================================================

class ArticleModelTests(TestCase):
    """Test Article and Magazine models."""

    def test_create_article(self):
        article = make_article('Test Article')
        article.save()
        self.assertEqual(str(article), 'Test Article')
        self.assertIsNotNone(article.created_at)
        self.assertFalse(article.is_favorite)

    def test_tags_json_field(self):
        article = make_article('Tags', tags=['Tech', 'Science'])
        article.save()
        article.refresh_from_db()
        self.assertEqual(article.tags, ['Tech', 'Science'])

    def test_display_content_backfill(self):
        """Blank or placeholder content shows the description instead."""
        for content in ('', '   ', 'No content available'):
            with self.subTest(content=content):
                article = make_article('Backfill', content=content, description='The description')
                self.assertEqual(article.display_content, 'The description')

        article = make_article('Kept', content='Real content')
        self.assertEqual(article.display_content, 'Real content')

    def test_default_ordering(self):
        now = timezone.now()
        make_article('Older', now - timedelta(hours=1)).save()
        make_article('Newer', now).save()

        self.assertEqual([a.title for a in Article.objects.all()], ['Newer', 'Older'])

    def test_magazine_to_dict(self):
        magazine = Magazine.objects.create(
            title='Developer Weekly', publisher='Code Publications', description='Weekly',
            issue_number=15, publication_date=timezone.now(), article_ids=[1, 2],
            category='Programming',
        )
        data = magazine.to_dict()
        self.assertEqual(data['issueNumber'], 15)
        self.assertEqual(data['articles'], [1, 2])
        self.assertEqual(str(magazine), 'Developer Weekly #15')

    def test_fallback_articles_are_fresh(self):
        first = get_fallback_articles()
        second = get_fallback_articles()
        self.assertIsNot(first[0], second[0])
        self.assertTrue(all(a.pk is None for a in first))


# =============================================================================
# MANAGEMENT COMMAND TESTS
# =============================================================================

class ManagementCommandTests(TestCase):
    """Test populate_sample_data and fetch_headlines."""

    def test_populate_sample_data(self):
        out = StringIO()
        call_command('populate_sample_data', stdout=out)

        self.assertEqual(Article.objects.count(), len(FALLBACK_ARTICLES))
        self.assertEqual(Magazine.objects.count(), len(FALLBACK_MAGAZINES))
        self.assertIn('Successfully created', out.getvalue())

    def test_populate_sample_data_clears_first(self):
        make_article('Stale').save()
        call_command('populate_sample_data', stdout=StringIO())
        call_command('populate_sample_data', stdout=StringIO())

        self.assertFalse(Article.objects.filter(title='Stale').exists())
        self.assertEqual(Article.objects.count(), len(FALLBACK_ARTICLES))

    @override_settings(NEWS_API_KEY='', READHUB_STORE='database')
    @patch('reader.newsapi.requests.get')
    def test_fetch_headlines_without_key(self, mock_get):
        out = StringIO()
        call_command('fetch_headlines', stdout=out)

        mock_get.assert_not_called()
        self.assertIn('Kotlin 1.9 Introduces Powerful New Features', out.getvalue())
        self.assertIn(f'{len(FALLBACK_ARTICLES)} articles from headlines', out.getvalue())

    @override_settings(NEWS_API_KEY='', READHUB_STORE='database')
    def test_fetch_headlines_query(self):
        call_command('populate_sample_data', stdout=StringIO())
        out = StringIO()
        call_command('fetch_headlines', '--query', 'mongodb', stdout=out)

        self.assertIn('1 articles matching "mongodb"', out.getvalue())
