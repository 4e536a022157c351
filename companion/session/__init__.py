"""Session state: models, pure transforms, the live store and persistence."""

from companion.session.models import Message, Session
from companion.session.store import SessionStore

__all__ = ["Message", "Session", "SessionStore"]
