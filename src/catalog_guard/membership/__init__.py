"""
catalog_guard.membership

Role and claim administration.

Responsibilities:
- `MembershipReconciler`: idempotent role/membership/claim edits over a directory.
"""

# Package marker.
