from __future__ import annotations
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, func
from domaindesk.models.accounts import Base


class Task(Base):
    __tablename__ = 'tasks'
    # Status constants
    STATUS_NOT_STARTED = 'not_started'
    STATUS_WORKING = 'working'
    STATUS_COMPLETED = 'completed'
    STATUS_SUBMITTED = 'submitted'
    STATUS_APPROVED = 'approved'
    STATUS_REJECTED = 'rejected'
    ALL_STATUSES = (STATUS_NOT_STARTED, STATUS_WORKING, STATUS_COMPLETED, STATUS_SUBMITTED, STATUS_APPROVED, STATUS_REJECTED)
    # What the staff status picker offers
    STAFF_STATUSES = (STATUS_NOT_STARTED, STATUS_WORKING, STATUS_COMPLETED)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[str] = mapped_column(String(120), nullable=False)
    contact_number: Mapped[str] = mapped_column(String(40), nullable=False)
    device_name: Mapped[str] = mapped_column(String(120), nullable=False)
    problem_reported: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=STATUS_NOT_STARTED, index=True)
    assigned_to: Mapped[Optional[int]] = mapped_column(ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True, index=True)
    staff_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey('profiles.id'), nullable=False)
    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def status_label(self) -> str:
        return self.status.replace('_', ' ')

# Status flow: not_started -> working -> completed -> submitted -> approved | rejected
# Rejected work goes back to the assigned staff member for rework.
