from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from teamspace.db.base import Base
from teamspace.core.permissions import Role


class Membership(Base):
    """
    Binds a user to an organization with a role ('ADMIN' or 'MEMBER').
    """
    __tablename__ = "memberships"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), nullable=False, default=Role.MEMBER.value)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    organization = relationship("Organization", back_populates="memberships")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint('user_id', 'organization_id', name='uq_membership_user_organization'),
    )

    def __repr__(self):
        return f"<Membership(org_id={self.organization_id}, user_id={self.user_id}, role='{self.role}')>"
