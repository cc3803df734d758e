# tests/conftest.py
"""
Pytest fixtures for Obra tests.

- organization: accounting enabled, no chart yet
- chart: the standard chart provisioned for `organization`
- actor: ActorContext for `user` in `organization`
- rubros / parties: operations rows the posting rules read
"""

from datetime import date

import pytest
from django.contrib.auth import get_user_model

from accounts.authz import ActorContext
from accounts.models import Organization
from accounting.chart import setup_standard_chart
from operations.models import Client, Project, Provider, Rubro


User = get_user_model()


# =============================================================================
# Organization & User Fixtures
# =============================================================================

@pytest.fixture
def organization(db):
    """Organization with accounting enabled."""
    return Organization.objects.create(
        name="Constructora Test",
        slug="constructora-test",
        enable_accounting=True,
    )


@pytest.fixture
def disabled_organization(db):
    """Organization that never turned accounting on."""
    return Organization.objects.create(
        name="Sin Contabilidad",
        slug="sin-contabilidad",
        enable_accounting=False,
    )


@pytest.fixture
def second_organization(db):
    """Second tenant for isolation tests."""
    return Organization.objects.create(
        name="Otra Constructora",
        slug="otra-constructora",
        enable_accounting=True,
    )


@pytest.fixture
def user(organization):
    return User.objects.create_user(
        email="contador@example.com",
        password="testpass123",
        name="Contador",
        organization=organization,
    )


@pytest.fixture
def actor(user, organization):
    return ActorContext(user=user, organization=organization)


# =============================================================================
# Chart of Accounts Fixtures
# =============================================================================

@pytest.fixture
def chart(organization):
    """Standard chart for `organization`, keyed by code."""
    return setup_standard_chart(organization)


@pytest.fixture
def second_chart(second_organization):
    return setup_standard_chart(second_organization)


# =============================================================================
# Operations Fixtures
# =============================================================================

@pytest.fixture
def rubros(organization):
    """Rubros keyed by name."""
    names = ["Materiales", "Mano Obra", "Administrativos", "Imprevistos"]
    return {
        name: Rubro.objects.create(organization=organization, name=name)
        for name in names
    }


@pytest.fixture
def customer(organization):
    return Client.objects.create(organization=organization, name="Cliente SA")


@pytest.fixture
def provider(organization):
    return Provider.objects.create(organization=organization, name="Corralón Norte")


@pytest.fixture
def project(organization):
    return Project.objects.create(organization=organization, name="Edificio Centro")


@pytest.fixture
def entry_date():
    return date(2024, 5, 15)
