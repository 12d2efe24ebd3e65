"""Report and vital sign models."""

from sqlalchemy import Column, String, DateTime, Date, ForeignKey, Text, Index, Integer
from sqlalchemy.orm import relationship
from datetime import datetime
from .base import Base, generate_id


class Report(Base):
    """Uploaded medical report file plus its metadata."""

    __tablename__ = "reports"

    id = Column(String, primary_key=True, default=generate_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String, nullable=False)
    report_type = Column(String, nullable=False)  # Blood Test, X-Ray, Prescription...

    # Backing file (opaque reference into the file store)
    file_path = Column(String, nullable=False)
    file_type = Column(String, nullable=False)  # declared MIME type
    original_name = Column(String, nullable=True)

    upload_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    report_date = Column(Date, nullable=False)  # clinical date
    notes = Column(Text, nullable=True)

    # Relationships
    owner = relationship("User", back_populates="reports")
    vitals = relationship(
        "Vital",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="[Vital.measured_at.desc(), Vital.entry_order.desc()]",
    )
    shares = relationship(
        "ShareGrant",
        back_populates="report",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_report_user_id", "user_id"),
        Index("idx_report_type", "report_type"),
        Index("idx_report_date", "report_date"),
    )


class Vital(Base):
    """A single measurement attached to exactly one report."""

    __tablename__ = "vitals"

    id = Column(String, primary_key=True, default=generate_id)
    report_id = Column(
        String, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False
    )

    vital_type = Column(String, nullable=False)  # Blood Pressure, Heart Rate...
    value = Column(String, nullable=False)
    unit = Column(String, nullable=False)
    measured_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    # insertion sequence; orders measurements that share a timestamp
    entry_order = Column(Integer, nullable=False, default=0)

    # Relationships
    report = relationship("Report", back_populates="vitals")

    __table_args__ = (
        Index("idx_vital_report_id", "report_id"),
        Index("idx_vital_type", "vital_type"),
        Index("idx_vital_measured_at", "measured_at"),
        Index("idx_vital_entry_order", "entry_order"),
    )
