from .user import User, UserManager
from .staff_profile import StaffProfile

__all__ = ["User", "UserManager", "StaffProfile"]
