from django.core.management.base import BaseCommand
from reader.services import get_article_service


class Command(BaseCommand):
    help = 'Fetch top headlines into the article store, or search with --query'

    def add_arguments(self, parser):
        parser.add_argument('--query', help='search instead of fetching headlines')
        parser.add_argument('--limit', type=int, default=10, help='number of articles to print')

    def handle(self, *args, **options):
        service = get_article_service()
        query = options.get('query')

        if query:
            articles = service.search(query)
        else:
            articles = service.fetch_and_merge()

        for article in articles[:options['limit']]:
            self.stdout.write(f"title: {article.title}")
            self.stdout.write(f"source: {article.source}")
            self.stdout.write(f"date: {article.published_at:%Y-%m-%d %H:%M}")
            self.stdout.write(f"summary:\n{article.display_content}\n")

        label = f'matching "{query}"' if query else 'from headlines'
        self.stdout.write(self.style.SUCCESS(f'{len(articles)} articles {label}'))
