"""Share grant model."""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from .base import Base, generate_id


class ShareGrant(Base):
    """
    Read-only access to one report for one recipient.

    The recipient email is the durable key. ``shared_with_user_id`` is filled
    when the email belonged to an account at share time and is nulled if that
    account is removed; the grant keeps working by email.
    """

    __tablename__ = "shared_access"

    id = Column(String, primary_key=True, default=generate_id)
    report_id = Column(
        String, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )
    shared_by = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    shared_with_email = Column(String, nullable=False)
    shared_with_user_id = Column(
        String, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    access_level = Column(String, nullable=False, default="read")
    shared_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    report = relationship("Report", back_populates="shares")
    grantor = relationship(
        "User", back_populates="shares_sent", foreign_keys=[shared_by]
    )
    recipient = relationship(
        "User", back_populates="shares_received", foreign_keys=[shared_with_user_id]
    )

    __table_args__ = (
        UniqueConstraint(
            "report_id", "shared_with_email", name="uq_share_report_email"
        ),
        Index("idx_share_report_id", "report_id"),
        Index("idx_share_email", "shared_with_email"),
        Index("idx_share_user_id", "shared_with_user_id"),
        Index("idx_share_shared_by", "shared_by"),
    )
