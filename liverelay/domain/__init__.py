"""
Domain layer containing the event stream protocol logic.

Submodules:
- relay: Topic routing, attendance, preauthentication and the session manager.
- utils: Domain-specific utilities (e.g., ID generation).
"""
