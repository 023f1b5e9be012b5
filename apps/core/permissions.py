# apps/core/permissions.py

from functools import wraps

from django.http import JsonResponse

from .models import Board, BoardMember

OWNER = BoardMember.OWNER
ADMIN = BoardMember.ADMIN
EDITOR = BoardMember.EDITOR
VIEWER = BoardMember.VIEWER


class BoardPermissions:
    """
    Role-based permissions on a board

    owner  -> everything
    admin  -> edit content, manage members and board settings
    editor -> create, update, move and delete lists and tasks
    viewer -> read only
    """

    @staticmethod
    def can_view(user, board):
        """Any role at all gives read access"""
        return board.role_for(user) is not None

    @staticmethod
    def can_edit(user, board):
        """Lists and tasks: create, update, move, delete"""
        return board.role_for(user) in (OWNER, ADMIN, EDITOR)

    @staticmethod
    def can_manage_members(user, board):
        return board.role_for(user) in (OWNER, ADMIN)

    @staticmethod
    def can_update_board(user, board):
        return board.role_for(user) in (OWNER, ADMIN)

    @staticmethod
    def can_delete_board(user, board):
        return board.role_for(user) == OWNER

    @staticmethod
    def can_change_member(user, board, member):
        """
        Admins manage editors and viewers; only the owner touches other admins
        """
        role = board.role_for(user)
        if role == OWNER:
            return True
        if role == ADMIN:
            return member.role != ADMIN or member.user_id == user.id
        return False


CHECKS = {
    'view': BoardPermissions.can_view,
    'edit': BoardPermissions.can_edit,
    'manage': BoardPermissions.can_manage_members,
    'update': BoardPermissions.can_update_board,
    'delete': BoardPermissions.can_delete_board,
}


# Decorators for the JSON API

def api_login_required(view_func):
    """
    Like login_required, but answers 401 JSON instead of redirecting
    """

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse({'error': 'Authentication required'}, status=401)
        return view_func(request, *args, **kwargs)

    return wrapped_view


def requires_board_access(action='view'):
    """
    Loads the board from ``board_id``, checks the role for ``action`` and
    puts the board on ``request.board``. Unknown board -> 404, missing
    role -> 403.

    ``action`` may also map HTTP methods to actions:
    @requires_board_access({'GET': 'view', 'DELETE': 'delete'})
    """
    actions = action if isinstance(action, dict) else None

    def decorator(view_func):
        @wraps(view_func)
        def wrapped_view(request, board_id, *args, **kwargs):
            try:
                board = Board.objects.select_related('owner').get(id=board_id)
            except Board.DoesNotExist:
                return JsonResponse({'error': 'Board not found'}, status=404)

            if not BoardPermissions.can_view(request.user, board):
                # do not reveal boards the user cannot see
                return JsonResponse({'error': 'Board not found'}, status=404)

            check = CHECKS[actions.get(request.method, 'view') if actions else action]
            if not check(request.user, board):
                return JsonResponse({'error': 'You do not have permission for this action'}, status=403)

            request.board = board
            return view_func(request, board_id, *args, **kwargs)

        return wrapped_view

    return decorator
