# apps/board/__init__.py

"""
Board - Kanban app of Taskboard

- JSON API for boards, lists, tasks, members and activity
- Consistent drag-and-drop moves (dense positions, locked rows)
- WebSockets for real-time updates
- ``apps.board.sync``: client that keeps a local copy of a board in sync
"""
