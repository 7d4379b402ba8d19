# synergysphere/initial_data.py

import asyncio
import logging
from sqlalchemy.orm import Session
from synergysphere.database import SessionLocal, engine
from synergysphere.models.base import Base
import synergysphere.models  # noqa: F401  регистрирует все таблицы в Base.metadata
from synergysphere.crud.user import create_user, get_user_by_email
from synergysphere.core.settings import settings
from synergysphere.core.exceptions import BaseAppException

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("SynergySphere.InitialData")

def create_tables() -> None:
    logger.info("Creating database tables...")
    Base.metadata.create_all(bind=engine)

async def create_initial_admin_user(db: Session) -> None:
    admin_email = settings.FIRST_ADMIN_EMAIL
    admin_password = settings.FIRST_ADMIN_PASSWORD
    if not admin_email or not admin_password:
        logger.info("FIRST_ADMIN_EMAIL/FIRST_ADMIN_PASSWORD not set. Skipping admin creation.")
        return

    if get_user_by_email(db, admin_email):
        logger.info(f"Admin user '{admin_email}' already exists. No action taken.")
        return

    logger.info(f"Admin user '{admin_email}' not found. Creating...")
    try:
        create_user(db, {
            "name": settings.FIRST_ADMIN_NAME,
            "email": admin_email,
            "password": admin_password,
            "role": "admin",
        })
        logger.info(f"Admin user '{admin_email}' created successfully.")
    except BaseAppException as e:
        logger.error(f"Failed to create admin user: {e.message}")

async def main() -> None:
    logger.info("Initializing initial data...")
    create_tables()
    db = SessionLocal()
    try:
        await create_initial_admin_user(db)
    finally:
        db.close()
    logger.info("Finished initial data setup.")

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()

    asyncio.run(main())
