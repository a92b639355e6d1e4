"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskInput, DerivedTask, Metrics, enums)
- normalizer.py: coerces raw JSON records into Task entities
- metrics.py: per-task derived fields and aggregate metrics
- ranking.py: deterministic ordering of derived tasks
- task_store.py: in-memory store with add/update/delete/undo and cached views
- task_source.py: HTTP/file sources for the initial payload
- seed.py: synthetic fallback data
"""
