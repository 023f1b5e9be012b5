# apps/core/__init__.py

"""
Core - base app of Taskboard

- Models (User, Board, BoardMember, TaskList, Task, Activity)
- Role-based board permissions
- User search and health check endpoints
- Seed command for development
"""
