# /home/ubuntu/herowars/apps/heroes/urls.py
# ================================================================================
"""URLConf for the Heroes API (async views)."""

from __future__ import annotations

from django.urls import path
from django.views.decorators.csrf import csrf_exempt

from .views import HeroDetailView, HeroExportView, HeroListView

app_name = "heroes"

urlpatterns = [
    path("", HeroListView.as_view(), name="list"),
    path("/export", HeroExportView.as_view(), name="export"),
    path("/<str:hero_id>", csrf_exempt(HeroDetailView.as_view()), name="detail"),
]
