"""
Snaptick: daily task tracking core.

Subpackages:
- core: state holder (view-model), events, rollover, ports
- tasks: task model, SQLite store, sorting and free-time analysis
- prefs: SQLite key/value preference store
- notifications: reminder scheduling keyed by task uuid
- cli / connectors: console front-end driving the view-model
"""

__version__ = "1.0.0"
