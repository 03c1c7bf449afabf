"""
Services Module

Business logic over the storage layer:
- AccountService: registration, login, sessions and access-code subscriptions
"""
from .accounts import AccountService

__all__ = ["AccountService"]
