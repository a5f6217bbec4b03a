"""
Write panel URLs.

Mounted at /write/ in config/urls.py.
"""

from django.urls import path

from .views import ArticleEditorView

app_name = 'articles'

urlpatterns = [
    path('', ArticleEditorView.as_view(), name='write'),
]
