from lifeboard.models.user import User
from lifeboard.models.idea import Idea
from lifeboard.models.subscription import Subscription

__all__ = [
    "User",
    "Idea",
    "Subscription",
]
