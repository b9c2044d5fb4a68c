"""
Seed the first HOD account.

HOD accounts are provisioned out of band; the HOD then creates faculty and
approves students through the API.

    HOD_EMAIL=hod@college.edu HOD_PASSWORD=... python create_users.py
"""

import os
import sys

from attendance_app.database import SessionLocal, engine
from attendance_app.models import Base, User, UserType, Hod
from attendance_app.core.security import get_password_hash
from attendance_app.core.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger("create_users")


def create_initial_hod():
    """Create the initial HOD unless one already exists"""
    email = os.getenv("HOD_EMAIL", "hod@example.com").strip().lower()
    password = os.getenv("HOD_PASSWORD")
    if not password:
        logger.error("HOD_PASSWORD not found in environment variables")
        return False

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        existing = db.query(User).filter(User.email == email).first()
        if existing:
            logger.info(f"User {email} already exists ({existing.type.value})")
            return True

        user = User(
            name=os.getenv("HOD_NAME", "Head of Department"),
            email=email,
            password_hash=get_password_hash(password),
            type=UserType.HOD,
        )
        user.hod = Hod(department=os.getenv("HOD_DEPARTMENT", "Computer Science"), phone=os.getenv("HOD_PHONE"))
        db.add(user)
        db.commit()
        logger.info(f"Created HOD account {email}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating HOD: {e}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    success = create_initial_hod()
    sys.exit(0 if success else 1)
