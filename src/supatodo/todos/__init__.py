"""
Todo subsystem.

Components:
- todo_models.py: data structures (Todo, Priority, TodoDraft)
- todo_list.py: fetch/create/toggle/delete orchestration with re-fetch after each mutation
"""
