import logging

from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from .forms import SearchForm
from .services import get_article_service, get_magazine_service
from .stores import NotFound

logger = logging.getLogger(__name__)

HOME_ARTICLE_COUNT = 6
HOME_MAGAZINE_COUNT = 3


def _services():
    return get_article_service(), get_magazine_service()


@require_GET
def home(request):
    try:
        article_service, magazine_service = _services()
        articles = article_service.list_all()[:HOME_ARTICLE_COUNT]
        magazines = magazine_service.list_all()[:HOME_MAGAZINE_COUNT]
    except Exception:
        logger.exception("Failed to load home page data")
        articles, magazines = [], []

    return render(request, 'reader/index.html', {
        'articles': articles,
        'magazines': magazines,
        'form': SearchForm(),
    })


@require_GET
def article_list(request):
    article_service, _ = _services()
    return render(request, 'reader/articles.html', {
        'articles': article_service.list_all(),
        'form': SearchForm(),
    })


@require_GET
def magazine_list(request):
    _, magazine_service = _services()
    return render(request, 'reader/magazines.html', {
        'magazines': magazine_service.list_all(),
        'form': SearchForm(),
    })


@require_GET
def favorites(request):
    article_service, magazine_service = _services()
    return render(request, 'reader/favorites.html', {
        'favorite_articles': article_service.favorites(),
        'favorite_magazines': magazine_service.favorites(),
        'form': SearchForm(),
    })


@require_GET
def search(request):
    form = SearchForm(request.GET or None)
    context = {
        'form': form,
        'articles': [],
        'magazines': [],
        'search_query': request.GET.get('query', ''),
    }

    if form.is_valid():
        query = form.cleaned_data['query']
        logger.info("Searching for: %s", query)
        try:
            article_service, magazine_service = _services()
            context['articles'] = article_service.search(query)
            context['magazines'] = magazine_service.search(query)
            context['search_query'] = query
        except Exception as e:
            logger.exception("Search failed for %r", query)
            context['error'] = f"Search failed: {e}"

    context['no_results'] = not context['articles'] and not context['magazines']
    return render(request, 'reader/search_results.html', context)


@require_POST
def toggle_article_favorite(request, pk):
    article_service, _ = _services()
    try:
        article_service.toggle_favorite(pk)
    except NotFound as e:
        raise Http404(str(e))
    return redirect('article_list')


@require_POST
def toggle_magazine_favorite(request, pk):
    _, magazine_service = _services()
    try:
        magazine_service.toggle_favorite(pk)
    except NotFound as e:
        raise Http404(str(e))
    return redirect('magazine_list')


@require_POST
def fetch_articles(request):
    article_service = get_article_service()
    new_articles = article_service.fetch_and_merge()
    logger.info("Fetched %d new articles", len(new_articles))
    return redirect('article_list')


@require_GET
def debug_articles(request):
    article_service, _ = _services()
    return JsonResponse([a.to_dict() for a in article_service.list_all()], safe=False)


@require_GET
def debug_status(request):
    article_service, magazine_service = _services()
    status = article_service.status()
    return JsonResponse({
        'articles': status['articles'],
        'magazines': magazine_service.status()['magazines'],
        'apiKeySet': status['apiKeySet'],
    })
