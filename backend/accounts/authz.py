# accounts/authz.py
"""
Request-scoped actor context.

Provides:
- ActorContext: immutable (user, organization) pair handed to commands
- resolve_actor: build the context from an authenticated request
- require_accounting_enabled: gate for the accounting API
"""

from dataclasses import dataclass

from django.core.exceptions import PermissionDenied
from rest_framework.exceptions import NotAuthenticated

from accounts.models import Organization


@dataclass(frozen=True)
class ActorContext:
    """
    Who is acting, and in which tenant.

    Commands receive this instead of the request so they can be called from
    views, management commands, Celery tasks and tests alike.
    """
    user: object  # User model, None for system actors
    organization: Organization

    @property
    def is_authenticated(self) -> bool:
        return bool(getattr(self.user, "is_authenticated", False))

    @classmethod
    def system(cls, organization: Organization) -> "ActorContext":
        """Actor for work not triggered by a person (tasks, commands)."""
        return cls(user=None, organization=organization)


def resolve_actor(request) -> ActorContext:
    """
    Extract ActorContext from the current request.

    The organization is re-read from the database on every request so an
    accounting toggle takes effect immediately.

    Raises:
        NotAuthenticated: If user is not authenticated
        PermissionDenied: If the user belongs to no active organization
    """
    user = getattr(request, "user", None)

    if not user or not user.is_authenticated:
        raise NotAuthenticated("Authentication required.")

    if not user.organization_id:
        raise PermissionDenied("User does not belong to an organization.")

    try:
        organization = Organization.objects.get(pk=user.organization_id, is_active=True)
    except Organization.DoesNotExist:
        raise PermissionDenied("Organization is inactive or does not exist.")

    return ActorContext(user=user, organization=organization)


def require_accounting_enabled(actor: ActorContext) -> None:
    """Raises PermissionDenied if the actor's organization has accounting off."""
    if not actor.organization.enable_accounting:
        raise PermissionDenied("Accounting is not enabled for this organization.")
