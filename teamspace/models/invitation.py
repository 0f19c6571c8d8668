from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from teamspace.db.base import Base


class Invitation(Base):
    """
    Pending offer for an email address to join an organization with a role.

    The row is deleted when the invitation is accepted or cancelled. Expiry
    is derived from `expires` and never stored.
    """
    __tablename__ = "invitations"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    role = Column(String(20), nullable=False)
    token = Column(String(128), nullable=False, unique=True, index=True)
    expires = Column(DateTime(timezone=True), nullable=False)
    organization_id = Column(Integer, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    organization = relationship("Organization", back_populates="invitations")
    invited_by = relationship("User")

    __table_args__ = (
        UniqueConstraint('email', 'organization_id', name='uq_invitation_email_organization'),
    )

    def is_expired(self, now: datetime = None) -> bool:
        now = now or datetime.now(timezone.utc)
        expires = self.expires
        # SQLite hands back naive datetimes; stored values are always UTC
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return now > expires

    def __repr__(self):
        return f"<Invitation(id={self.id}, email='{self.email}', org_id={self.organization_id})>"
