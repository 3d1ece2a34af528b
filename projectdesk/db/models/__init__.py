"""Re-export all models so Base.metadata sees them."""

from projectdesk.db.models.project import Project
from projectdesk.db.models.user import User

__all__ = [
    "Project",
    "User",
]
