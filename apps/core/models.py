# apps/core/models.py

import uuid

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    User account

    Authentication itself is delegated to an external identity provider;
    ``external_id`` stores the provider's subject when there is one.
    """

    external_id = models.CharField(max_length=255, unique=True, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'app_user'

    def display_name(self):
        return self.get_full_name() or self.username

    def get_boards(self):
        """Boards the user owns or is a member of"""
        return Board.objects.filter(
            models.Q(owner=self) | models.Q(memberships__user=self)
        ).distinct()

    def __str__(self):
        return self.display_name()


class Board(models.Model):
    """Kanban board: ordered lists of tasks, one owner, any number of members"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    owner = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='owned_boards'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'board'
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    def role_for(self, user):
        """
        Returns 'owner', the member role, or None when the user has no access
        """
        if not user or not user.is_authenticated:
            return None
        if self.owner_id == user.id:
            return BoardMember.OWNER
        membership = self.memberships.filter(user=user).first()
        return membership.role if membership else None

    def create_default_lists(self):
        """Creates the default lists for a new board"""
        titles = getattr(settings, 'TASKBOARD_DEFAULT_LISTS', ['To Do', 'In Progress', 'Done'])
        for idx, title in enumerate(titles):
            TaskList.objects.create(board=self, title=title, position=idx)


class BoardMember(models.Model):
    """Collaborator on a board. The owner never has a row here."""

    OWNER = 'owner'
    ADMIN = 'admin'
    EDITOR = 'editor'
    VIEWER = 'viewer'

    ROLE_CHOICES = [
        (ADMIN, 'Admin'),
        (EDITOR, 'Editor'),
        (VIEWER, 'Viewer'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=EDITOR)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'board_member'
        ordering = ['created_at']
        unique_together = ['board', 'user']

    def __str__(self):
        return f"{self.user} - {self.get_role_display()} @ {self.board}"


class TaskList(models.Model):
    """Ordered column of tasks"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='lists'
    )
    title = models.CharField(max_length=100)
    position = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'task_list'
        ordering = ['position', 'created_at']

    def __str__(self):
        return f"{self.title} - {self.board.title}"

    def next_position(self):
        return self.tasks.count()


class Task(models.Model):
    """A card. ``position`` is its index inside ``task_list``."""

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task_list = models.ForeignKey(
        TaskList,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    position = models.IntegerField(default=0)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    due_date = models.DateField(null=True, blank=True)
    assignee = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_tasks'
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name='created_tasks'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', 'created_at']

    def __str__(self):
        return self.title

    @property
    def board_id(self):
        return self.task_list.board_id


class Activity(models.Model):
    """Entry of a board's activity history"""

    ACTION_CHOICES = [
        ('board_created', 'Board created'),
        ('board_updated', 'Board updated'),
        ('list_created', 'List created'),
        ('list_updated', 'List updated'),
        ('list_deleted', 'List deleted'),
        ('task_created', 'Task created'),
        ('task_updated', 'Task updated'),
        ('task_moved', 'Task moved'),
        ('task_deleted', 'Task deleted'),
        ('member_added', 'Member added'),
        ('member_removed', 'Member removed'),
        ('member_role_changed', 'Member role changed'),
    ]

    board = models.ForeignKey(
        Board,
        on_delete=models.CASCADE,
        related_name='activities'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    task = models.ForeignKey(
        Task,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='activities'
    )
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    details = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity'
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'activities'

    def __str__(self):
        return f"{self.get_action_display()} by {self.user or 'system'}"
