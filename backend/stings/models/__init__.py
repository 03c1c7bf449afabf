"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account, session and subscription model
"""
from .user import User
