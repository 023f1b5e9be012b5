# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Activity, Board, BoardMember, Task, TaskList, User


@admin.register(User)
class TaskboardUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'first_name', 'last_name', 'is_staff', 'created_at')
    fieldsets = UserAdmin.fieldsets + (
        ('Identity provider', {'fields': ('external_id',)}),
    )


class BoardMemberInline(admin.TabularInline):
    model = BoardMember
    extra = 0
    raw_id_fields = ('user',)


class TaskListInline(admin.TabularInline):
    model = TaskList
    extra = 0
    ordering = ('position',)


@admin.register(Board)
class BoardAdmin(admin.ModelAdmin):
    list_display = ('title', 'owner', 'created_at', 'updated_at')
    search_fields = ('title', 'owner__username')
    inlines = [TaskListInline, BoardMemberInline]


@admin.register(TaskList)
class TaskListAdmin(admin.ModelAdmin):
    list_display = ('title', 'board', 'position')
    list_filter = ('board',)
    ordering = ('board', 'position')


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'task_list', 'position', 'priority', 'assignee', 'due_date')
    list_filter = ('priority', 'task_list__board')
    search_fields = ('title', 'description')
    raw_id_fields = ('assignee', 'created_by')


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ('action', 'board', 'user', 'created_at')
    list_filter = ('action',)
    readonly_fields = ('board', 'user', 'task', 'action', 'details', 'created_at')
