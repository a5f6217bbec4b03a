"""
URL configuration for Scriptorium project.
"""

from django.contrib import admin
from django.urls import path, include

from apps.core.metrics import metrics_view

urlpatterns = [
    path('admin/', admin.site.urls),
    # Write panel
    path('write/', include('apps.articles.urls')),
    # Prometheus
    path('metrics/', metrics_view, name='prometheus-metrics'),
]

# Customize admin site
admin.site.site_header = "Scriptorium Administration"
admin.site.site_title = "Scriptorium Admin Portal"
admin.site.index_title = "Welcome to Scriptorium Administration"
