# apps/board/services.py

"""
Board mutations

Every write goes through here so that the three side effects always happen
together: positions stay dense (0..n-1 per list), an Activity row is
recorded, and the change is broadcast to the board's WebSocket group once
the transaction commits.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.board.sync.positions import clamp_index, move_in_sequence
from apps.core.models import Activity, Board, BoardMember, Task, TaskList, User
from apps.core.utils import parse_position

from .serializers import list_to_dict, member_to_dict, task_to_dict

logger = logging.getLogger(__name__)

TASK_FIELDS = ('title', 'description', 'priority', 'due_date', 'assignee')


def board_group_name(board_id):
    return f'board_{board_id}'


# === Broadcast & activity ===

def broadcast(board_id, event_type, message):
    """
    Sends an event to every socket subscribed to the board
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    message = dict(message)
    message.setdefault('timestamp', timezone.now().isoformat())
    async_to_sync(channel_layer.group_send)(
        board_group_name(board_id),
        {
            'type': event_type,
            'message': message,
        }
    )


def broadcast_on_commit(board_id, event_type, message):
    transaction.on_commit(lambda: broadcast(board_id, event_type, message), robust=True)


def record_activity(board, user, action, task=None, **details):
    return Activity.objects.create(
        board=board,
        user=user,
        task=task,
        action=action,
        details=details,
    )


def _event(user, origin=None, **fields):
    """
    Broadcast payload. user_id is the acting user unless the event is
    about another user (member removed), actor_id is always the actor.
    """
    fields.setdefault('user_id', user.id if user else None)
    fields.update({
        'actor_id': user.id if user else None,
        'username': user.username if user else None,
        'origin': origin,
    })
    return fields


def _renumber(queryset):
    """Rewrites positions as 0..n-1 following the current order"""
    changed = []
    for idx, obj in enumerate(queryset):
        if obj.position != idx:
            obj.position = idx
            changed.append(obj)
    if changed:
        type(changed[0]).objects.bulk_update(changed, ['position'])
    return changed


# === Boards ===

@transaction.atomic
def create_board(user, title, description=''):
    board = Board.objects.create(owner=user, title=title, description=description)
    record_activity(board, user, 'board_created', title=title)
    logger.info(f"📋 Board '{title}' created by {user.username}")
    return board


@transaction.atomic
def update_board(board, user, origin=None, **fields):
    changes = {}
    for field in ('title', 'description'):
        if field in fields and getattr(board, field) != fields[field]:
            changes[field] = fields[field]
            setattr(board, field, fields[field])

    if changes:
        board.save()
        record_activity(board, user, 'board_updated', **changes)
        broadcast_on_commit(board.id, 'board_updated', _event(user, origin, board_id=str(board.id), **changes))
    return board


def delete_board(board, user):
    board_id = board.id
    with transaction.atomic():
        board.delete()
        broadcast_on_commit(board_id, 'board_refresh', _event(user, reason='board_deleted'))
    logger.info(f"🗑️ Board {board_id} deleted by {user.username}")


# === Lists ===

@transaction.atomic
def create_list(board, user, title, origin=None):
    position = board.lists.count()
    task_list = TaskList.objects.create(board=board, title=title, position=position)
    record_activity(board, user, 'list_created', list_id=str(task_list.id), title=title)
    broadcast_on_commit(board.id, 'list_created', _event(user, origin, list=list_to_dict(task_list, [])))
    return task_list


@transaction.atomic
def update_list(task_list, user, title=None, position=None, origin=None):
    board = task_list.board
    changes = {}

    if title is not None and title != task_list.title:
        task_list.title = title
        task_list.save(update_fields=['title'])
        changes['title'] = title

    if position is not None:
        try:
            position = parse_position(position)
        except ValueError as exc:
            raise ValidationError({'position': str(exc)})

        lists = list(TaskList.objects.select_for_update().filter(board=board).order_by('position', 'created_at'))
        order, _ = move_in_sequence([tl.id for tl in lists], task_list.id, position)
        by_id = {tl.id: tl for tl in lists}
        _renumber(by_id[list_id] for list_id in order)
        new_position = order.index(task_list.id)
        if new_position != task_list.position:
            changes['position'] = new_position
        task_list.position = new_position

    if changes:
        record_activity(board, user, 'list_updated', list_id=str(task_list.id), **changes)
        broadcast_on_commit(board.id, 'list_updated', _event(user, origin, list=list_to_dict(task_list)))
    return task_list


@transaction.atomic
def delete_list(task_list, user, origin=None):
    board = task_list.board
    list_id, title = str(task_list.id), task_list.title
    task_list.delete()
    _renumber(TaskList.objects.select_for_update().filter(board=board).order_by('position', 'created_at'))

    record_activity(board, user, 'list_deleted', list_id=list_id, title=title)
    broadcast_on_commit(board.id, 'list_deleted', _event(user, origin, list_id=list_id))


# === Tasks ===

@transaction.atomic
def create_task(task_list, user, title, position=None, origin=None, **fields):
    """
    Creates a task at the end of the list, or at ``position`` shifting the
    tasks below it
    """
    siblings = list(Task.objects.select_for_update().filter(task_list=task_list).order_by('position', 'created_at'))
    if position is None:
        position = len(siblings)
    else:
        try:
            position = clamp_index(parse_position(position), len(siblings))
        except ValueError as exc:
            raise ValidationError({'position': str(exc)})

    task = Task(task_list=task_list, title=title, position=position, created_by=user,
                **{k: v for k, v in fields.items() if k in TASK_FIELDS})
    task.full_clean()

    shifted = siblings[position:]
    for idx, sibling in enumerate(shifted, start=position + 1):
        sibling.position = idx
    if shifted:
        Task.objects.bulk_update(shifted, ['position'])
    task.save()

    board = task_list.board
    record_activity(board, user, 'task_created', task=task, title=title, list_title=task_list.title)
    broadcast_on_commit(board.id, 'task_created', _event(user, origin, task=task_to_dict(task)))
    return task


@transaction.atomic
def update_task(task, user, origin=None, **fields):
    changes = {}
    for field in TASK_FIELDS:
        if field in fields and getattr(task, field) != fields[field]:
            setattr(task, field, fields[field])
            value = fields[field]
            changes[field] = value.pk if isinstance(value, User) else (str(value) if value is not None else None)

    if changes:
        task.full_clean()
        task.save()
        board = task.task_list.board
        record_activity(board, user, 'task_updated', task=task, **changes)
        broadcast_on_commit(board.id, 'task_updated', _event(user, origin, task=task_to_dict(task)))
    return task


@transaction.atomic
def delete_task(task, user, origin=None):
    task_list = task.task_list
    board = task_list.board
    task_id, title = str(task.id), task.title
    task.delete()
    _renumber(Task.objects.select_for_update().filter(task_list=task_list).order_by('position', 'created_at'))

    record_activity(board, user, 'task_deleted', task_id=task_id, title=title)
    broadcast_on_commit(board.id, 'task_deleted', _event(user, origin, task_id=task_id, list_id=str(task_list.id)))


def move_task(task, destination_list, position, user, origin=None):
    """
    Moves a task so it ends up at ``position`` of ``destination_list``

    Rows of the source and destination lists are locked for the duration,
    both lists are renumbered, and a ``task_moved`` event is broadcast
    after commit. A position past the end appends. Moving a task onto its
    current place changes nothing and broadcasts nothing.

    Raises ValidationError for a list of another board or a bad position.
    """
    try:
        position = parse_position(position)
    except ValueError as exc:
        raise ValidationError({'position': str(exc)})

    with transaction.atomic():
        # lock the task first so a concurrent move cannot change its list under us
        task = Task.objects.select_for_update().select_related('task_list__board').get(pk=task.pk)
        source_list = task.task_list
        if destination_list.board_id != source_list.board_id:
            raise ValidationError({'list_id': 'Destination list belongs to another board'})

        locked = list(
            Task.objects.select_for_update()
            .filter(task_list_id__in={source_list.id, destination_list.id})
            .order_by('position', 'created_at')
        )
        by_id = {t.id: t for t in locked}
        source_ids = [t.id for t in locked if t.task_list_id == source_list.id]
        from_position = source_ids.index(task.id)

        if destination_list.id == source_list.id:
            new_source, new_destination = move_in_sequence(source_ids, task.id, position)
        else:
            destination_ids = [t.id for t in locked if t.task_list_id == destination_list.id]
            new_source, new_destination = move_in_sequence(source_ids, task.id, position, destination_ids)

        final_position = new_destination.index(task.id)
        if destination_list.id == source_list.id and final_position == from_position:
            return by_id[task.id]

        changed = {}
        for list_id, order in ((source_list.id, new_source), (destination_list.id, new_destination)):
            for idx, task_id in enumerate(order):
                row = by_id[task_id]
                if row.position != idx or row.task_list_id != list_id:
                    row.position = idx
                    row.task_list_id = list_id
                    changed[task_id] = row

        moved = by_id[task.id]
        moved.updated_at = timezone.now()
        changed[moved.id] = moved
        Task.objects.bulk_update(list(changed.values()), ['position', 'task_list', 'updated_at'])

        board = source_list.board
        record_activity(
            board, user, 'task_moved',
            task=moved,
            title=moved.title,
            from_list=source_list.title,
            to_list=destination_list.title,
            from_position=from_position,
            to_position=final_position,
        )
        broadcast_on_commit(board.id, 'task_moved', _event(
            user, origin,
            task_id=str(moved.id),
            source_list_id=str(source_list.id),
            list_id=str(destination_list.id),
            position=final_position,
        ))

    logger.info(f"🔀 Task {moved.id} moved to '{destination_list.title}' @ {final_position} by {user.username}")
    moved.task_list = destination_list
    return moved


# === Members ===

@transaction.atomic
def add_member(board, actor, user, role=BoardMember.EDITOR, origin=None):
    if role not in dict(BoardMember.ROLE_CHOICES):
        raise ValidationError({'role': f'Invalid role: {role}'})
    if user.id == board.owner_id:
        raise ValidationError('The owner is already on the board', code='conflict')
    if board.memberships.filter(user=user).exists():
        raise ValidationError(f'{user.display_name()} is already a member', code='conflict')

    member = BoardMember.objects.create(board=board, user=user, role=role)
    record_activity(board, actor, 'member_added', member_id=user.id, member=user.display_name(), role=role)
    broadcast_on_commit(board.id, 'member_added', _event(actor, origin, member=member_to_dict(member)))
    logger.info(f"👥 {user.username} added to board {board.id} as {role}")
    return member


@transaction.atomic
def change_member_role(member, actor, role, origin=None):
    if role not in dict(BoardMember.ROLE_CHOICES):
        raise ValidationError({'role': f'Invalid role: {role}'})
    if member.role != role:
        previous = member.role
        member.role = role
        member.save(update_fields=['role'])
        record_activity(member.board, actor, 'member_role_changed',
                        member_id=member.user_id, member=member.user.display_name(),
                        previous=previous, role=role)
        broadcast_on_commit(member.board_id, 'member_updated', _event(actor, origin, member=member_to_dict(member)))
    return member


@transaction.atomic
def remove_member(member, actor, origin=None):
    board = member.board
    user = member.user
    member.delete()
    Task.objects.filter(task_list__board=board, assignee=user).update(assignee=None)

    record_activity(board, actor, 'member_removed', member_id=user.id, member=user.display_name())
    broadcast_on_commit(board.id, 'member_removed', _event(actor, origin, user_id=user.id))
    logger.info(f"👋 {user.username} removed from board {board.id}")
