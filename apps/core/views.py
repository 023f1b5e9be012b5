# apps/core/views.py

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError, connection
from django.db.models import Q
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from apps import __version__

from .models import User
from .permissions import api_login_required
from .utils import user_color, user_initials

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 2


@api_login_required
@require_GET
def search_users(request):
    """
    Users by username, name or email, for the "add member" dialog

    ?q= needs at least 2 characters, ?limit= is capped by
    TASKBOARD_USER_SEARCH_LIMIT
    """
    query = request.GET.get('q', '').strip()
    max_limit = getattr(settings, 'TASKBOARD_USER_SEARCH_LIMIT', 10)
    try:
        limit = min(max(int(request.GET.get('limit', max_limit)), 1), max_limit)
    except ValueError:
        limit = max_limit

    if len(query) < MIN_SEARCH_LENGTH:
        return JsonResponse({'users': []})

    users = (
        User.objects.filter(is_active=True)
        .filter(
            Q(username__icontains=query)
            | Q(first_name__icontains=query)
            | Q(last_name__icontains=query)
            | Q(email__icontains=query)
        )
        .exclude(pk=request.user.pk)
        .order_by('username')[:limit]
    )

    return JsonResponse({
        'users': [
            {
                'id': u.id,
                'username': u.username,
                'name': u.display_name(),
                'email': u.email,
                'initials': user_initials(u),
                'color': user_color(u.username),
            }
            for u in users
        ]
    })


@require_GET
def health_check(request):
    """
    Health check for monitoring
    """
    status = {
        'status': 'ok',
        'database': 'ok',
        'cache': 'ok',
        'timestamp': timezone.now().isoformat(),
        'version': __version__,
    }

    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        logger.error(f"❌ Health check - database unavailable: {e}")
        status.update({'status': 'unhealthy', 'database': str(e)})

    try:
        cache.set('health_check', 'ok', 60)
        if cache.get('health_check') != 'ok':
            status.update({'status': 'degraded', 'cache': 'unavailable'})
    except Exception as e:  # redis.ConnectionError and friends
        logger.warning(f"⚠️ Health check - cache unavailable: {e}")
        status.update({'status': 'degraded', 'cache': str(e)})

    return JsonResponse(status, status=500 if status['status'] == 'unhealthy' else 200)
