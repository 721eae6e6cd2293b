import uuid
from sqlalchemy import Column, String, Date, DateTime, Uuid
from sqlalchemy.orm import relationship

from fleet_issues.core.database import Base
from fleet_issues.models.associations import user_vessel_link
from fleet_issues.models.enums import VesselStatus
from fleet_issues.models.user import utcnow


class Vessel(Base):
    __tablename__ = "vessels"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # IMO Number is unique worldwide (e.g., "IMO9012345")
    imo = Column(String(10), unique=True, index=True, nullable=False)

    name = Column(String, nullable=False)      # e.g., "Pacific Dawn"
    flag = Column(String, nullable=False)      # e.g., "Liberia"
    vessel_type = Column(String, nullable=False)  # e.g., "Container Ship"
    status = Column(String, nullable=False, default=VesselStatus.ACTIVE.value)
    last_inspection_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    # RELATIONS
    crew = relationship(
        "User",
        secondary=user_vessel_link,
        back_populates="vessels"
    )
    issues = relationship("Issue", back_populates="vessel", passive_deletes=True)
