"""
Importing either model registers both with the mapper registry, so the
User.tasks / Task.owner relationship always resolves.
"""

from tasklist.app.models.task import Task
from tasklist.app.models.user import User

__all__ = ["Task", "User"]
