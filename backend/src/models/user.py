"""User model."""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import Base, TimestampMixin, generate_id


class User(Base, TimestampMixin):
    """Registered account. Owns reports and issues share grants."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_id)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    full_name = Column(String, nullable=False)

    # Relationships
    reports = relationship(
        "Report", back_populates="owner", cascade="all, delete-orphan"
    )
    shares_sent = relationship(
        "ShareGrant",
        back_populates="grantor",
        foreign_keys="ShareGrant.shared_by",
        cascade="all, delete-orphan",
    )
    # Grants addressed to this account; lookup only, the FK is SET NULL
    shares_received = relationship(
        "ShareGrant",
        back_populates="recipient",
        foreign_keys="ShareGrant.shared_with_user_id",
    )
