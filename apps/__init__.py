# apps/__init__.py

"""
Taskboard - Django apps

- core: models, permissions, users
- board: Kanban API, WebSockets and the sync client
"""

__version__ = '0.1.0'
