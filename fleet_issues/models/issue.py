import uuid
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import relationship

from fleet_issues.core.database import Base
from fleet_issues.models.enums import IssueStatus
from fleet_issues.models.user import utcnow


class Issue(Base):
    __tablename__ = "issues"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    vessel_id = Column(Uuid(as_uuid=True), ForeignKey("vessels.id", ondelete="CASCADE"), nullable=False, index=True)
    # Seed data may carry issues with no reporter
    reported_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    category = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    priority = Column(String, nullable=False)
    status = Column(String, nullable=False, default=IssueStatus.OPEN.value, index=True)
    recommendation = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)

    # Relationships
    vessel = relationship("Vessel", back_populates="issues")
    reporter = relationship("User", foreign_keys=[reported_by_id])
