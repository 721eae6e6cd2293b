import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship

from fleet_issues.core.database import Base
from fleet_issues.models.enums import UserRole
from fleet_issues.models.associations import user_vessel_link


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default=UserRole.CREW.value, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)

    # RELATIONS
    vessels = relationship(
        "Vessel",
        secondary=user_vessel_link,
        back_populates="crew",
        lazy="selectin"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
