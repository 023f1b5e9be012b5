# apps/board/serializers.py

"""
Plain dict builders for the JSON API and the WebSocket payloads.

The board payload is what clients cache: lists in order, each with its
tasks in order, positions included.
"""

from django.db.models import Prefetch

from apps.core.models import Task
from apps.core.utils import user_color, user_initials


def user_to_dict(user):
    if user is None:
        return None
    return {
        'id': user.id,
        'username': user.username,
        'first_name': user.first_name,
        'last_name': user.last_name,
        'email': user.email,
        'initials': user_initials(user),
        'color': user_color(user.username),
    }


def task_to_dict(task):
    return {
        'id': str(task.id),
        'list_id': str(task.task_list_id),
        'title': task.title,
        'description': task.description,
        'position': task.position,
        'priority': task.priority,
        'due_date': task.due_date.isoformat() if task.due_date else None,
        'assignee_id': task.assignee_id,
        'created_by_id': task.created_by_id,
        'created_at': task.created_at.isoformat(),
        'updated_at': task.updated_at.isoformat(),
    }


def list_to_dict(task_list, tasks=None):
    data = {
        'id': str(task_list.id),
        'board_id': str(task_list.board_id),
        'title': task_list.title,
        'position': task_list.position,
    }
    if tasks is not None:
        data['tasks'] = [task_to_dict(t) for t in tasks]
    return data


def member_to_dict(member):
    return {
        'id': member.id,
        'user_id': member.user_id,
        'role': member.role,
        'user': user_to_dict(member.user),
        'created_at': member.created_at.isoformat(),
    }


def board_summary(board, role=None):
    return {
        'id': str(board.id),
        'title': board.title,
        'description': board.description,
        'owner_id': board.owner_id,
        'role': role,
        'created_at': board.created_at.isoformat(),
        'updated_at': board.updated_at.isoformat(),
    }


def board_to_dict(board, role=None):
    """
    Full board state, used by the initial load, by error recovery and by
    the WebSocket ``sync_board`` request
    """
    lists = board.lists.prefetch_related(
        Prefetch('tasks', queryset=Task.objects.order_by('position', 'created_at'))
    ).order_by('position', 'created_at')
    members = board.memberships.select_related('user').order_by('created_at')

    data = board_summary(board, role)
    data.update({
        'owner': user_to_dict(board.owner),
        'members': [member_to_dict(m) for m in members],
        'lists': [list_to_dict(tl, tl.tasks.all()) for tl in lists],
    })
    return data


def activity_to_dict(activity):
    return {
        'id': activity.id,
        'action': activity.action,
        'label': activity.get_action_display(),
        'user': user_to_dict(activity.user),
        'task_id': str(activity.task_id) if activity.task_id else None,
        'details': activity.details,
        'created_at': activity.created_at.isoformat(),
    }
