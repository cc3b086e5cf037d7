"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, DisplayStatus)
- status_engine.py: overdue math, derived display status, transition rules
- analytics.py: per-employee efficiency scores
- task_store.py: SQLite-backed storage (full-record replacement)
- task_api.py: use cases (create/list/edit/delete) with permission checks
"""
