"""
URL configuration for pickleball fantasy project.
"""

import logging
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.db import connection
from django.core.cache import cache

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check endpoint
    GET /health
    """
    services = {}
    try:
        # Check database connection
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        services['database'] = 'connected'
    except Exception as e:
        logger.error(f'Health check database failure: {e}')
        return JsonResponse({
            'status': 'error',
            'error': 'Service unavailable',
            'details': str(e)
        }, status=503)

    try:
        cache.get('health')
        services['cache'] = 'connected'
    except Exception as e:
        logger.warning(f'Health check cache failure: {e}')
        services['cache'] = 'unavailable'

    return JsonResponse({'status': 'ok', 'services': services})


urlpatterns = [
    path('admin/', admin.site.urls),

    # Health check
    path('health', health_check, name='health_check'),

    # API routes
    path('api/auth/', include('apps.authentication.urls')),
    path('api/', include('apps.tournaments.urls')),
    path('api/', include('apps.referees.urls')),
    path('api/', include('apps.matches.urls')),
    path('api/', include('apps.fantasy.urls')),
    path('api/', include('apps.payments.urls')),
]
