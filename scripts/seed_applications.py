"""
Seed the two demo applications the frontend ships with (one per applicant category).
Run: python -m scripts.seed_applications (from the project root).
"""
import asyncio
import logging

from config import settings
from database import Database
from models import AgentType
from services import state
from services.applicant_type import legal_steps
from utils.logging import configure_logging

logger = logging.getLogger(__name__)

DEMO_APPLICATIONS = [
    {"id": "e10906df-3ea3-4aec-820f-1845736ad049", "agent_type": AgentType.INDIVIDUAL},
    {"id": "c7039573-d573-4f83-9a35-e69d5b7b87fb", "agent_type": AgentType.CORPORATE},
]


async def seed(db: Database) -> int:
    """Create any missing demo applications; returns how many were added."""
    created = 0
    async with db.sessionmaker() as session:
        async with session.begin():
            for data in DEMO_APPLICATIONS:
                if await state.get_application(session, data["id"]) is not None:
                    logger.info("Application %s already exists, skipping", data["id"])
                    continue
                agent_type = data["agent_type"]
                await state.create_application(session, data["id"], agent_type, legal_steps(agent_type).start)
                logger.info("Seeded %s application %s", agent_type.value, data["id"])
                created += 1
    return created


async def main():
    configure_logging(settings.log_level)
    db = Database(settings)
    try:
        await db.init()
        await seed(db)
    finally:
        await db.dispose()
    logger.info("Seed complete.")


if __name__ == "__main__":
    asyncio.run(main())
