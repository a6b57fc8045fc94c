# backend/portal/models/__init__.py
"""
Central model registry.

Import this once at startup (main.py, alembic env) so SQLAlchemy sees every
mapped class before relationships are configured.
"""
from portal.db import Base  # noqa: F401  re-export Base

from .church import Church  # noqa: F401
from .profile import Profile, ProfileRole  # noqa: F401
from .participant import Participant  # noqa: F401
from .session import PortalSession, SessionKind  # noqa: F401
