# accounts/__init__.py
"""
Accounts app - users and tenants for Obra.

This app provides:
- Organization: tenant model, carries the enable_accounting flag
- User: email-login user bound to one organization
- ActorContext: request-scoped (user, organization) pair for commands
"""
