from django.core.management.base import BaseCommand
from reader.mock_data import get_fallback_articles, get_fallback_magazines
from reader.models import Article, Magazine
from reader.stores import DatabaseStore


class Command(BaseCommand):
    help = 'Replace stored articles and magazines with the fallback set'

    def handle(self, *args, **kwargs):
        article_store = DatabaseStore(Article, 'published_at')
        magazine_store = DatabaseStore(Magazine, 'publication_date', validate=True)

        # Clear existing data
        article_store.clear()
        magazine_store.clear()

        articles = article_store.add_all(get_fallback_articles())
        magazines = magazine_store.add_all(get_fallback_magazines([a.pk for a in articles]))

        self.stdout.write(
            self.style.SUCCESS(
                f'Successfully created {len(articles)} sample articles and {len(magazines)} sample magazines'
            )
        )
