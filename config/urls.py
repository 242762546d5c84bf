"""URL configuration for the coworking booking API.

All API endpoints live under ``/api/``: the auth routes of the users app,
the bookings resource and the OpenAPI schema.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView  # type: ignore

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include(('apps.users.auth_urls', 'auth'), namespace='auth')),
    path('api/', include('apps.bookings.urls')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
]
