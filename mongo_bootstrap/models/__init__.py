from .category import Category
from .notification import Notification
from .token import Token
from .user import User
from .value import Value

__all__ = ["Category", "Notification", "Token", "User", "Value"]
