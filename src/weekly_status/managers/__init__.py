"""
Collection managers.

Components:
- weeks.py: week containers and their ordered tiles
- tasks.py: flat task list, derived sort order, column widths
- skills.py: ordered skill cards
- reorder.py: bounds-checked single-element moves shared by the above
- columns.py: pure column-width math used by the task table

Managers never keep their own copy of the document; every change goes through
StateSynchronizer.commit().
"""
