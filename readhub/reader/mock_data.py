from datetime import timedelta

from django.utils import timezone

from .models import Article, Magazine

# Fallback set used when NEWS_API_KEY is unset or NewsAPI is unreachable.
# Timestamps are relative so the seed always looks recent.
FALLBACK_ARTICLES = [
    {
        'title': 'Django 5.0 Released with New Features',
        'content': 'Django 5.0 brings facet filters in the admin, simplified form field rendering and database-computed default values...',
        'author': 'Django Team',
        'description': 'Latest release of the Django web framework',
        'source': 'Django Blog',
        'url': 'https://www.djangoproject.com/weblog/2023/dec/04/django-50-released/',
        'url_to_image': 'https://picsum.photos/400/200?random=10',
        'age': timedelta(days=1),
        'category': 'Technology',
        'tags': ['django', 'python', 'tutorial'],
    },
    {
        'title': 'Kotlin 1.9 Introduces Powerful New Features',
        'content': 'The latest Kotlin version introduces several exciting features...',
        'author': 'Kotlin Team',
        'description': "What's new in Kotlin 1.9",
        'source': 'Kotlin Blog',
        'url': 'https://kotlinlang.org/docs/whatsnew19.html',
        'url_to_image': 'https://picsum.photos/400/200?random=11',
        'age': timedelta(hours=6),
        'category': 'Programming',
        'tags': ['kotlin', 'programming', 'update'],
    },
    {
        'title': 'MongoDB 6.0 Enhances Query Performance',
        'content': "MongoDB's latest release focuses on improving query performance...",
        'author': 'MongoDB Team',
        'description': 'Performance improvements in MongoDB 6.0',
        'source': 'MongoDB Blog',
        'url': 'https://www.mongodb.com/blog/post/mongodb-6-0-release',
        'url_to_image': 'https://picsum.photos/400/200?random=12',
        'age': timedelta(hours=2),
        'category': 'Database',
        'tags': ['mongodb', 'database', 'performance'],
    },
    {
        'title': 'The Future of AI in Development',
        'content': '',
        'author': 'AI Expert',
        'description': 'Artificial intelligence is transforming how we write code.',
        'source': 'Tech Insights',
        'url': 'https://example.com/ai-future',
        'url_to_image': 'https://picsum.photos/400/200?random=2',
        'age': timedelta(hours=5),
        'category': 'Artificial Intelligence',
        'tags': ['ai', 'development', 'future'],
    },
]

FALLBACK_MAGAZINES = [
    {
        'title': 'Developer Weekly',
        'publisher': 'Code Publications',
        'description': 'Weekly magazine for software developers',
        'cover_image': 'https://picsum.photos/300/400?random=1',
        'issue_number': 15,
        'age': timedelta(days=7),
        'category': 'Programming',
    },
    {
        'title': 'Tech Insights',
        'publisher': 'Tech Media Group',
        'description': 'Monthly technology trends and analysis',
        'cover_image': 'https://picsum.photos/300/400?random=2',
        'issue_number': 42,
        'age': timedelta(days=14),
        'category': 'Technology',
    },
    {
        'title': 'AI Today',
        'publisher': 'Future Publications',
        'description': 'Cutting-edge artificial intelligence research',
        'cover_image': 'https://picsum.photos/300/400?random=3',
        'issue_number': 8,
        'age': timedelta(days=21),
        'category': 'Artificial Intelligence',
    },
]


def get_fallback_articles():
    """Return fresh, unsaved Article instances for the fallback set."""
    now = timezone.now()
    articles = []
    for data in FALLBACK_ARTICLES:
        data = dict(data)
        age = data.pop('age')
        articles.append(Article(published_at=now - age, is_favorite=False, **data))
    return articles


def get_fallback_magazines(article_ids=None):
    """
    Return fresh, unsaved Magazine instances for the fallback set.

    Args:
        article_ids: identifiers of stored articles to attach to the first issue
    """
    now = timezone.now()
    magazines = []
    for index, data in enumerate(FALLBACK_MAGAZINES):
        data = dict(data)
        age = data.pop('age')
        ids = list(article_ids or []) if index == 0 else []
        magazines.append(Magazine(publication_date=now - age, article_ids=ids, is_favorite=False, **data))
    return magazines
