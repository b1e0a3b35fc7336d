from .user import User
from .progress import ProgressEntry, ActivityCompletion
from .streak import StreakRecord

__all__ = ["User", "ProgressEntry", "ActivityCompletion", "StreakRecord"]
