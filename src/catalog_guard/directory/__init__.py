"""
catalog_guard.directory

Principal directory collaborator.

Responsibilities:
- Define the directory protocol consumed by the evaluator and reconciler.
- Provide an in-memory implementation (tests, local dev) and a SQL-backed one.
"""

# Package marker.
