# ABOUTME: Account component package
# ABOUTME: Exports the account domain service

from .service import AccountService

__all__ = ["AccountService"]
