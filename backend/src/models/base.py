"""Declarative base and shared column mixins."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def generate_id() -> str:
    """Primary keys are UUID4 strings."""
    return str(uuid.uuid4())


class TimestampMixin:
    """Adds created_at / updated_at columns."""

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )
