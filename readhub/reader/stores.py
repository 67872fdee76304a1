import itertools
import logging
import threading
from abc import ABC, abstractmethod

from django.conf import settings
from django.db import transaction
from django.db.models import Case, Value, When

from .mock_data import get_fallback_articles, get_fallback_magazines
from .models import Article, Magazine

logger = logging.getLogger(__name__)


class NotFound(Exception):
    """No record with the requested identifier exists."""


class RecordStore(ABC):
    """
    Storage for one record type (Article or Magazine).

    Implementations keep records ordered by their date field, newest first,
    with ties in insertion order.
    """

    def __init__(self, model, date_field, validate=False):
        self.model = model
        self.date_field = date_field
        self.validate = validate

    def check(self, record):
        """Run model validation when the store was created with validate=True."""
        if self.validate:
            record.full_clean(validate_unique=False)

    @abstractmethod
    def add(self, record):
        """Store a record, assign its identifier and return it."""
        pass

    def add_all(self, records):
        return [self.add(record) for record in records]

    @abstractmethod
    def add_all_if_empty(self, records):
        """Store the records only if the store holds nothing yet. Returns what was stored."""
        pass

    @abstractmethod
    def get(self, pk):
        """Return the record with this identifier or raise NotFound."""
        pass

    @abstractmethod
    def all(self):
        pass

    @abstractmethod
    def favorites(self):
        pass

    @abstractmethod
    def toggle_favorite(self, pk):
        """
        Flip the favorite flag of a record.

        Returns:
            bool: the new flag value

        Raises:
            NotFound: if no record has this identifier
        """
        pass

    @abstractmethod
    def count(self):
        pass

    @abstractmethod
    def clear(self):
        pass


class MemoryStore(RecordStore):
    """In-process store; records are unsaved model instances keyed by a counter id."""

    def __init__(self, model, date_field, validate=False):
        super().__init__(model, date_field, validate)
        self._records = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _insert(self, record):
        record.pk = next(self._ids)
        self._records[record.pk] = record

    def add(self, record):
        self.check(record)
        with self._lock:
            self._insert(record)
        return record

    def add_all_if_empty(self, records):
        for record in records:
            self.check(record)
        with self._lock:
            if self._records:
                return []
            for record in records:
                self._insert(record)
        return list(records)

    def get(self, pk):
        with self._lock:
            try:
                return self._records[int(pk)]
            except (KeyError, TypeError, ValueError):
                raise NotFound(f"{self.model.__name__} not found: {pk}")

    def _sorted(self, records):
        # sorted() is stable with reverse=True, so equal dates keep insertion order
        return sorted(records, key=lambda r: getattr(r, self.date_field), reverse=True)

    def all(self):
        with self._lock:
            records = list(self._records.values())
        return self._sorted(records)

    def favorites(self):
        with self._lock:
            records = [r for r in self._records.values() if r.is_favorite]
        return self._sorted(records)

    def toggle_favorite(self, pk):
        with self._lock:
            try:
                record = self._records[int(pk)]
            except (KeyError, TypeError, ValueError):
                raise NotFound(f"{self.model.__name__} not found: {pk}")
            record.is_favorite = not record.is_favorite
            return record.is_favorite

    def count(self):
        with self._lock:
            return len(self._records)

    def clear(self):
        with self._lock:
            self._records.clear()


class DatabaseStore(RecordStore):
    """Store backed by the Django ORM."""

    def _ordered(self, queryset):
        return queryset.order_by(f'-{self.date_field}', 'pk')

    def add(self, record):
        self.check(record)
        record.save()
        return record

    def add_all(self, records):
        with transaction.atomic():
            return [self.add(record) for record in records]

    def add_all_if_empty(self, records):
        with transaction.atomic():
            if self.model.objects.select_for_update().exists():
                return []
            return [self.add(record) for record in records]

    def get(self, pk):
        try:
            return self.model.objects.get(pk=pk)
        except (self.model.DoesNotExist, ValueError, TypeError):
            raise NotFound(f"{self.model.__name__} not found: {pk}")

    def all(self):
        return list(self._ordered(self.model.objects.all()))

    def favorites(self):
        return list(self._ordered(self.model.objects.filter(is_favorite=True)))

    def toggle_favorite(self, pk):
        # A single UPDATE flips the flag, so concurrent toggles cannot lose a write.
        with transaction.atomic():
            try:
                updated = self.model.objects.filter(pk=pk).update(
                    is_favorite=Case(
                        When(is_favorite=True, then=Value(False)),
                        default=Value(True),
                    )
                )
            except (ValueError, TypeError):
                updated = 0
            if not updated:
                raise NotFound(f"{self.model.__name__} not found: {pk}")
            return self.model.objects.filter(pk=pk).values_list('is_favorite', flat=True).get()

    def count(self):
        return self.model.objects.count()

    def clear(self):
        self.model.objects.all().delete()


STORE_KINDS = {
    'articles': (Article, 'published_at', False),
    'magazines': (Magazine, 'publication_date', True),
}

_memory_stores = {}
_memory_lock = threading.Lock()


def get_store(kind):
    """
    Get the configured store for 'articles' or 'magazines'.

    The READHUB_STORE setting picks the strategy: 'database' (default) or
    'memory'. Memory stores live for the whole process; both are created
    and seeded together on first use, with the first magazine issue
    listing the seeded articles.
    """
    model, date_field, validate = STORE_KINDS[kind]
    backend = getattr(settings, 'READHUB_STORE', 'database')

    if backend == 'database':
        return DatabaseStore(model, date_field, validate)
    if backend != 'memory':
        raise ValueError(f"Unknown READHUB_STORE backend: {backend}")

    with _memory_lock:
        if not _memory_stores:
            _memory_stores.update(_seeded_memory_stores())
        return _memory_stores[kind]


def _seeded_memory_stores():
    stores = {name: MemoryStore(*spec) for name, spec in STORE_KINDS.items()}
    articles = stores['articles'].add_all(get_fallback_articles())
    stores['magazines'].add_all(get_fallback_magazines([a.pk for a in articles]))
    logger.info("Seeded in-memory stores with %d articles and %d magazines",
                stores['articles'].count(), stores['magazines'].count())
    return stores


def reset_memory_stores():
    """Drop the process-wide memory stores."""
    with _memory_lock:
        _memory_stores.clear()
