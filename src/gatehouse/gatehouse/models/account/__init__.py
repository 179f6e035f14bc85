# ABOUTME: Account aggregate models package exports
# ABOUTME: Exports the user entity, its profile record and the command models that create or patch them

from .entity import Entity
from .user import User, UserProfile, NewAccount, UserPatch

__all__ = ["Entity", "User", "UserProfile", "NewAccount", "UserPatch"]
