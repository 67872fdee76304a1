from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

NO_CONTENT = "No content available"


class Article(models.Model):
    title = models.CharField(max_length=500)
    content = models.TextField(blank=True, default='')
    author = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    source = models.CharField(max_length=255)
    url = models.URLField(max_length=1000)
    url_to_image = models.URLField(max_length=1000, null=True, blank=True)
    published_at = models.DateTimeField()
    category = models.CharField(max_length=100)
    tags = models.JSONField(default=list, blank=True)
    is_favorite = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.title

    @property
    def display_content(self):
        """Content for display, backfilled from the description when blank."""
        if not self.content or not self.content.strip() or self.content == NO_CONTENT:
            return self.description
        return self.content

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'content': self.display_content,
            'author': self.author,
            'description': self.description,
            'source': self.source,
            'url': self.url,
            'urlToImage': self.url_to_image,
            'publishedAt': self.published_at.isoformat() if self.published_at else None,
            'category': self.category,
            'tags': list(self.tags or []),
            'isFavorite': self.is_favorite,
        }

    class Meta:
        ordering = ['-published_at', 'id']


class Magazine(models.Model):
    title = models.CharField(max_length=255)
    publisher = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    cover_image = models.URLField(max_length=1000, null=True, blank=True)
    issue_number = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    publication_date = models.DateTimeField()
    article_ids = models.JSONField(default=list, blank=True)
    category = models.CharField(max_length=100)
    is_favorite = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.title} #{self.issue_number}"

    def to_dict(self):
        return {
            'id': self.pk,
            'title': self.title,
            'publisher': self.publisher,
            'description': self.description,
            'coverImage': self.cover_image,
            'issueNumber': self.issue_number,
            'publicationDate': self.publication_date.isoformat() if self.publication_date else None,
            'articles': list(self.article_ids or []),
            'category': self.category,
            'isFavorite': self.is_favorite,
        }

    class Meta:
        ordering = ['-publication_date', 'id']
