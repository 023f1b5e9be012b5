# apps/board/views.py

import json
import logging
from functools import wraps

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.core.paginator import Paginator
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from apps.core.models import BoardMember, Task, TaskList, User
from apps.core.permissions import BoardPermissions, api_login_required, requires_board_access

from . import services
from .serializers import (
    activity_to_dict,
    board_summary,
    board_to_dict,
    list_to_dict,
    member_to_dict,
    task_to_dict,
    user_to_dict,
)
from .sync.api import CLIENT_ID_HEADER

logger = logging.getLogger(__name__)


# === Helpers ===

def json_api(view_func):
    """
    Turns the exceptions raised by services into JSON error responses

    ValidationError -> 400 (409 for conflicts), missing objects -> 404,
    anything else is logged and re-raised
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as e:
            status = 409 if getattr(e, 'code', None) == 'conflict' else 400
            logger.info(f"⚠️ {request.method} {request.path} rejected: {e.messages}")
            if hasattr(e, 'error_dict'):
                return JsonResponse({'error': 'Invalid data', 'errors': e.message_dict}, status=status)
            return JsonResponse({'error': ' '.join(e.messages)}, status=status)
        except (ObjectDoesNotExist, Http404):
            return JsonResponse({'error': 'Not found'}, status=404)
        except Exception:
            logger.exception(f"💥 {request.method} {request.path} failed")
            raise

    return wrapped_view


def read_json(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise ValidationError('Invalid JSON body')
    if not isinstance(data, dict):
        raise ValidationError('JSON body must be an object')
    return data


def client_origin(request):
    """Id of the client that issued the request, echoed back in broadcasts"""
    return request.headers.get(CLIENT_ID_HEADER) or None


def require_title(data):
    title = (data.get('title') or '').strip()
    if not title:
        raise ValidationError({'title': 'This field is required'})
    return title


def resolve_assignee(board, user_id):
    """Assignee must have access to the board"""
    if user_id in (None, ''):
        return None
    try:
        user = User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise ValidationError({'assignee_id': 'Unknown user'})
    if board.role_for(user) is None:
        raise ValidationError({'assignee_id': 'Assignee must be a member of the board'})
    return user


def task_fields(board, data):
    fields = {}
    for key in ('description', 'priority', 'due_date'):
        if key in data:
            fields[key] = data[key] if data[key] != '' else None
    if 'description' in fields and fields['description'] is None:
        fields['description'] = ''
    if 'assignee_id' in data:
        fields['assignee'] = resolve_assignee(board, data['assignee_id'])
    return fields


def board_task(board, task_id):
    return get_object_or_404(Task.objects.select_related('task_list__board'), pk=task_id, task_list__board=board)


def board_list(board, list_id):
    try:
        return TaskList.objects.select_related('board').get(pk=list_id, board=board)
    except (TaskList.DoesNotExist, ValidationError):
        raise Http404('List not found')


# === Boards ===

@csrf_exempt
@api_login_required
@require_http_methods(['GET', 'POST'])
@json_api
def boards(request):
    """
    GET lists the boards the user owns or belongs to, POST creates one
    """
    if request.method == 'POST':
        data = read_json(request)
        board = services.create_board(request.user, require_title(data), data.get('description', ''))
        return JsonResponse({'board': board_to_dict(board, BoardMember.OWNER)}, status=201)

    user_boards = request.user.get_boards().select_related('owner')
    return JsonResponse({
        'boards': [board_summary(b, b.role_for(request.user)) for b in user_boards],
    })


@csrf_exempt
@api_login_required
@require_http_methods(['GET', 'PATCH', 'DELETE'])
@requires_board_access({'GET': 'view', 'PATCH': 'update', 'DELETE': 'delete'})
@json_api
def board_detail(request, board_id):
    board = request.board

    if request.method == 'DELETE':
        services.delete_board(board, request.user)
        return JsonResponse({'success': True})

    if request.method == 'PATCH':
        data = read_json(request)
        fields = {}
        if 'title' in data:
            fields['title'] = require_title(data)
        if 'description' in data:
            fields['description'] = data['description'] or ''
        services.update_board(board, request.user, origin=client_origin(request), **fields)

    return JsonResponse({'board': board_to_dict(board, board.role_for(request.user))})


# === Lists ===

@csrf_exempt
@api_login_required
@require_http_methods(['POST'])
@requires_board_access('edit')
@json_api
def list_create(request, board_id):
    data = read_json(request)
    task_list = services.create_list(request.board, request.user, require_title(data), origin=client_origin(request))
    return JsonResponse({'list': list_to_dict(task_list, [])}, status=201)


@csrf_exempt
@api_login_required
@require_http_methods(['PATCH', 'DELETE'])
@requires_board_access('edit')
@json_api
def list_detail(request, board_id, list_id):
    task_list = board_list(request.board, list_id)

    if request.method == 'DELETE':
        services.delete_list(task_list, request.user, origin=client_origin(request))
        return JsonResponse({'success': True})

    data = read_json(request)
    title = require_title(data) if 'title' in data else None
    services.update_list(task_list, request.user, title=title, position=data.get('position'),
                         origin=client_origin(request))
    return JsonResponse({'list': list_to_dict(task_list, task_list.tasks.all())})


# === Tasks ===

@csrf_exempt
@api_login_required
@require_http_methods(['POST'])
@requires_board_access('edit')
@json_api
def task_create(request, board_id):
    board = request.board
    data = read_json(request)
    if not data.get('list_id'):
        raise ValidationError({'list_id': 'This field is required'})

    task_list = board_list(board, data['list_id'])
    task = services.create_task(
        task_list,
        request.user,
        require_title(data),
        position=data.get('position'),
        origin=client_origin(request),
        **task_fields(board, data)
    )
    return JsonResponse({'task': task_to_dict(task)}, status=201)


@csrf_exempt
@api_login_required
@require_http_methods(['GET', 'PATCH', 'DELETE'])
@requires_board_access({'GET': 'view', 'PATCH': 'edit', 'DELETE': 'edit'})
@json_api
def task_detail(request, board_id, task_id):
    board = request.board
    task = board_task(board, task_id)

    if request.method == 'DELETE':
        services.delete_task(task, request.user, origin=client_origin(request))
        return JsonResponse({'success': True})

    if request.method == 'PATCH':
        data = read_json(request)
        fields = task_fields(board, data)
        if 'title' in data:
            fields['title'] = require_title(data)
        services.update_task(task, request.user, origin=client_origin(request), **fields)

    activities = task.activities.select_related('user')[:20]
    return JsonResponse({
        'task': task_to_dict(task),
        'activity': [activity_to_dict(a) for a in activities],
    })


@csrf_exempt
@api_login_required
@require_http_methods(['POST'])
@requires_board_access('edit')
@json_api
def task_move(request, board_id, task_id):
    """
    Moves a task: ``{"list_id": ..., "position": ...}``

    ``position`` is the index the task takes in the destination list once
    the move is done. Used by the drag-and-drop client.
    """
    board = request.board
    task = board_task(board, task_id)
    data = read_json(request)

    if not data.get('list_id'):
        raise ValidationError({'list_id': 'This field is required'})
    if 'position' not in data:
        raise ValidationError({'position': 'This field is required'})

    destination = board_list(board, data['list_id'])
    task = services.move_task(task, destination, data['position'], request.user, origin=client_origin(request))
    return JsonResponse({'task': task_to_dict(task)})


# === Members ===

@csrf_exempt
@api_login_required
@require_http_methods(['GET', 'POST'])
@requires_board_access({'GET': 'view', 'POST': 'manage'})
@json_api
def members(request, board_id):
    board = request.board

    if request.method == 'POST':
        data = read_json(request)
        try:
            user = User.objects.get(pk=data.get('user_id'), is_active=True)
        except (User.DoesNotExist, ValueError, TypeError):
            raise ValidationError({'user_id': 'Unknown user'})
        role = data.get('role') or BoardMember.EDITOR
        if role == BoardMember.ADMIN and board.role_for(request.user) != BoardMember.OWNER:
            return JsonResponse({'error': 'Only the owner can add admins'}, status=403)

        member = services.add_member(board, request.user, user, role, origin=client_origin(request))
        return JsonResponse({'member': member_to_dict(member)}, status=201)

    memberships = board.memberships.select_related('user')
    return JsonResponse({
        'owner': user_to_dict(board.owner),
        'members': [member_to_dict(m) for m in memberships],
    })


@csrf_exempt
@api_login_required
@require_http_methods(['PATCH', 'DELETE'])
@requires_board_access('manage')
@json_api
def member_detail(request, board_id, user_id):
    board = request.board
    if user_id == board.owner_id:
        raise ValidationError('The owner cannot be changed or removed')

    member = get_object_or_404(BoardMember.objects.select_related('user', 'board'), board=board, user_id=user_id)
    if not BoardPermissions.can_change_member(request.user, board, member):
        return JsonResponse({'error': 'You do not have permission for this action'}, status=403)

    if request.method == 'DELETE':
        services.remove_member(member, request.user, origin=client_origin(request))
        return JsonResponse({'success': True})

    data = read_json(request)
    role = data.get('role')
    if role == BoardMember.ADMIN and board.role_for(request.user) != BoardMember.OWNER:
        return JsonResponse({'error': 'Only the owner can promote admins'}, status=403)
    services.change_member_role(member, request.user, role, origin=client_origin(request))
    return JsonResponse({'member': member_to_dict(member)})


# === Activity ===

@api_login_required
@require_http_methods(['GET'])
@requires_board_access('view')
def activity(request, board_id):
    """
    Board history, newest first, paginated with ?page=
    """
    activities = request.board.activities.select_related('user')
    paginator = Paginator(activities, getattr(settings, 'TASKBOARD_ACTIVITY_PAGE_SIZE', 20))
    page = paginator.get_page(request.GET.get('page'))

    return JsonResponse({
        'activity': [activity_to_dict(a) for a in page.object_list],
        'page': page.number,
        'num_pages': paginator.num_pages,
        'count': paginator.count,
        'has_next': page.has_next(),
    })
