"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Timing, OpenTiming, TaskTotal)
- task_store.py: SQLite-backed task catalog with change notification
- task_api.py: save/delete helpers and the TaskList model used by front-ends
"""
