from sqlalchemy import Table, Column, ForeignKey, Uuid
from fleet_issues.core.database import Base

# Crew <-> Vessel assignments.
# The composite primary key keeps one row per (user, vessel) pair.
user_vessel_link = Table(
    "user_vessel_link",
    Base.metadata,
    Column("user_id", Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("vessel_id", Uuid(as_uuid=True), ForeignKey("vessels.id", ondelete="CASCADE"), primary_key=True)
)
