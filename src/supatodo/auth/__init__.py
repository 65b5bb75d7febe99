"""
Auth subsystem.

Components:
- auth_models.py: Session, User, AuthEvent, AuthMode
- session_manager.py: mirrors the backend's session into the view state
"""
