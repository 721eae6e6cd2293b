import asyncio
import logging
from datetime import date

from sqlalchemy import delete, select

from fleet_issues.core.database import SessionLocal, init_models
from fleet_issues.core.security import get_password_hash
from fleet_issues.models.enums import IssuePriority, IssueStatus, UserRole, VesselStatus
from fleet_issues.models.issue import Issue
from fleet_issues.models.user import User
from fleet_issues.models.vessel import Vessel

logger = logging.getLogger(__name__)

USERS = [
    {"email": "admin@fleet.com", "password": "admin123", "role": UserRole.ADMIN},
    {"email": "crew@vessel.com", "password": "crew123", "role": UserRole.CREW},
]

VESSELS = [
    {
        "name": "Pacific Dawn",
        "imo": "IMO9012345",
        "flag": "Liberia",
        "vessel_type": "Container Ship",
        "status": VesselStatus.ACTIVE,
        "last_inspection_date": date(2024, 6, 15),
        "assign_crew": True,
    },
    {
        "name": "Atlantic Star",
        "imo": "IMO9023456",
        "flag": "Panama",
        "vessel_type": "Bulk Carrier",
        "status": VesselStatus.IN_PORT,
        "last_inspection_date": date(2024, 5, 20),
        "assign_crew": True,
    },
    {
        "name": "Nordic Explorer",
        "imo": "IMO9034567",
        "flag": "Norway",
        "vessel_type": "Tanker",
        "status": VesselStatus.UNDER_MAINTENANCE,
        "last_inspection_date": date(2024, 3, 10),
        "assign_crew": False,
    },
]

# (vessel imo, category, description, priority, status, recommendation, reported by crew?)
ISSUES = [
    ("IMO9012345", "Engine", "Unusual noise from main engine at high RPM.", IssuePriority.HIGH, IssueStatus.OPEN, None, True),
    ("IMO9012345", "Safety", "Life jacket stock low in forward section.", IssuePriority.MED, IssueStatus.RESOLVED, "Life jackets replenished.", True),
    ("IMO9023456", "Navigation", "GPS intermittent signal in specific area.", IssuePriority.LOW, IssueStatus.OPEN, None, True),
    ("IMO9023456", "Electrical", "Port-side deck lights flickering.", IssuePriority.MED, IssueStatus.OPEN, None, True),
    ("IMO9034567", "Hull", "Rust spots on starboard hull near waterline.", IssuePriority.HIGH, IssueStatus.RESOLVED, "Inspection completed; minor repairs scheduled.", False),
    ("IMO9012345", "Other", "Galley exhaust fan not operating correctly.", IssuePriority.LOW, IssueStatus.RESOLVED, "Resolved during routine check.", True),
]


async def seed_database(session_factory=SessionLocal) -> dict:
    """
    Idempotent for users, vessels and assignments. Issues are wiped and recreated.
    """
    logger.info("🌱 Seeding fleet database...")

    async with session_factory() as db:
        # --- 1. USERS ---
        users = {}
        for u_data in USERS:
            result = await db.execute(select(User).where(User.email == u_data["email"]))
            user = result.scalars().first()
            if not user:
                user = User(
                    email=u_data["email"],
                    password_hash=get_password_hash(u_data["password"]),
                    role=u_data["role"].value,
                    vessels=[],
                )
                db.add(user)
                logger.info(f"   👤 Created user {u_data['email']} ({u_data['role'].value})")
            users[u_data["role"]] = user
        await db.flush()

        crew = users[UserRole.CREW]

        # --- 2. VESSELS + ASSIGNMENTS ---
        vessels = {}
        for v_data in VESSELS:
            result = await db.execute(select(Vessel).where(Vessel.imo == v_data["imo"]))
            vessel = result.scalars().first()
            if not vessel:
                vessel = Vessel(
                    name=v_data["name"],
                    imo=v_data["imo"],
                    flag=v_data["flag"],
                    vessel_type=v_data["vessel_type"],
                    status=v_data["status"].value,
                    last_inspection_date=v_data["last_inspection_date"],
                )
                db.add(vessel)
                logger.info(f"   ⚓ Created vessel {vessel.name}")
            vessels[v_data["imo"]] = vessel

            if v_data["assign_crew"] and vessel not in crew.vessels:
                crew.vessels.append(vessel)
        await db.flush()

        # --- 3. ISSUES ---
        await db.execute(delete(Issue))
        for imo, category, description, priority, status, recommendation, by_crew in ISSUES:
            db.add(
                Issue(
                    vessel_id=vessels[imo].id,
                    category=category,
                    description=description,
                    priority=priority.value,
                    status=status.value,
                    recommendation=recommendation,
                    reported_by_id=crew.id if by_crew else None,
                )
            )

        await db.commit()

    summary = {
        "admin": users[UserRole.ADMIN].email,
        "crew": crew.email,
        "vessels": len(VESSELS),
        "issues": len(ISSUES),
    }
    logger.info(f"✅ Seed done: {summary}")
    return summary


async def main():
    await init_models()
    await seed_database()


def run():
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())


if __name__ == "__main__":
    run()
