"""
Core application modules.
Contains essential infrastructure components:
- access_codes: Static access-code table and lookup
- db: Storage client (Tortoise ORM) with explicit init/close lifecycle
- errors: Domain exceptions rendered by the API layer
- security: Password hashing and session token generation
"""
