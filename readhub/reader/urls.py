from django.urls import path
from .views import (
    home, article_list, magazine_list, favorites, search,
    toggle_article_favorite, toggle_magazine_favorite, fetch_articles,
    debug_articles, debug_status,
)

urlpatterns = [
    path("", home, name="home"),
    path("articles/", article_list, name="article_list"),
    path("magazines/", magazine_list, name="magazine_list"),
    path("favorites/", favorites, name="favorites"),
    path("search/", search, name="search"),
    path("articles/<int:pk>/favorite/", toggle_article_favorite, name="toggle_article_favorite"),
    path("magazines/<int:pk>/favorite/", toggle_magazine_favorite, name="toggle_magazine_favorite"),
    path("fetch-articles/", fetch_articles, name="fetch_articles"),
    path("api/debug/articles/", debug_articles, name="debug_articles"),
    path("api/debug/status/", debug_status, name="debug_status"),
]
