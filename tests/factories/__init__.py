"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
All factories support async creation via create_async() method.

Usage:
    from tests.factories import UserFactory, OrganizationFactory

    # Create user
    user = await UserFactory.create_async(db_session, email="custom@acme.com")

    # Create organization owned by the user
    org = await OrganizationFactory.create_with_owner_async(db_session, owner=user)
"""

from tests.factories.user import UserFactory
from tests.factories.organization import OrganizationFactory
from tests.factories.membership import MembershipFactory
from tests.factories.invitation import InvitationFactory

__all__ = [
    "UserFactory",
    "OrganizationFactory",
    "MembershipFactory",
    "InvitationFactory",
]
