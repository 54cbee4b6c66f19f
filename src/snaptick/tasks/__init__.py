"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_store.py: SQLite-backed storage + live "today" query
- task_sorting.py: display sort orders (SortTask)
- task_analysis.py: free-time / duration breakdown
"""
