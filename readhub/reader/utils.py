import logging
from datetime import datetime, timezone as dt_timezone

from bs4 import BeautifulSoup
from django.utils import timezone

logger = logging.getLogger(__name__)

# Tags NewsAPI descriptions actually carry; anything else in angle brackets
# (C++ headers, generics) is left as text.
MARKUP_TAGS = ['p', 'br', 'b', 'strong', 'i', 'em', 'a', 'ul', 'ol', 'li', 'div', 'span', 'img']


def strip_markup(value):
    """
    Remove HTML markup from a remote description.

    Args:
        value: description text from NewsAPI

    Returns:
        str: plain text if the value contains known HTML tags, otherwise the
        input unchanged
    """
    if not isinstance(value, str) or '<' not in value:
        return value
    soup = BeautifulSoup(value, 'html.parser')
    if not soup.find(MARKUP_TAGS):
        return value
    return ' '.join(soup.get_text(' ').split())


def parse_published_at(value):
    """
    Parse a NewsAPI publishedAt timestamp such as '2024-06-15T14:30:00Z'.

    The trailing UTC designator is stripped and the result is made aware in
    UTC. Any failure falls back to the current time.
    """
    if not value:
        return timezone.now()
    try:
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1]
        parsed = datetime.fromisoformat(text)
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, dt_timezone.utc)
        return parsed
    except (ValueError, TypeError, AttributeError):
        logger.debug("Unparsable publishedAt %r, using current time", value)
        return timezone.now()


def matches_query(record, query, fields):
    """Case-insensitive substring match of query against any of the named fields."""
    needle = query.lower()
    for field in fields:
        value = getattr(record, field, None)
        if isinstance(value, (list, tuple)):
            if any(needle in str(item).lower() for item in value):
                return True
        elif value and needle in str(value).lower():
            return True
    return False
