"""
Main URL configuration for the async JSON API.
"""

# Django Imports
from django.conf import settings
from django.urls import include, path
from django.views import defaults as default_views

# -----------------------------------------------------------------
# API URL Patterns
# Grouping API endpoints here makes versioning (e.g., v2) clean.
# -----------------------------------------------------------------
api_v1_patterns = [
    path("heroes", include("apps.heroes.urls")),
]

# -----------------------------------------------------------------
# Main URL Patterns
# -----------------------------------------------------------------
urlpatterns = [
    # --- API Versioning ---
    path("api/v1/", include(api_v1_patterns)),
]

# --- Global Error Handlers for API ---
# Any unhandled URL or server error returns JSON instead of an HTML page.
handler404 = "apps.core.views.custom_handler.json_404_handler"
handler500 = "apps.core.views.custom_handler.json_500_handler"

# -----------------------------------------------------------------
# Development-Only Patterns (DEBUG=True)
# -----------------------------------------------------------------
if settings.DEBUG:
    # Human-friendly error page previews for development
    urlpatterns += [
        path("400/", default_views.bad_request, kwargs={"exception": Exception("Bad Request!")}),
        path("403/", default_views.permission_denied, kwargs={"exception": Exception("Permission Denied")}),
        path("404/", default_views.page_not_found, kwargs={"exception": Exception("Page not Found")}),
        path("500/", default_views.server_error),
    ]
