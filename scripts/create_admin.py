"""
Create (or promote) an admin account.

    python scripts/create_admin.py admin@example.com 'S3cret-password' --name "Site Admin"
"""
import argparse
import logging
import os
import sys

# Ensure we can import resume_tailor when run from the repo root
sys.path.append(os.getcwd())

from resume_tailor.database import SessionLocal, init_db
from resume_tailor.models.user import User, UserRole
from resume_tailor.services.auth import get_password_hash

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def create_admin_user(email: str, password: str, full_name: str = None) -> None:
    init_db()
    with SessionLocal() as db:
        email = email.lower()
        user = db.query(User).filter(User.email == email).first()
        if user:
            if user.role == UserRole.ADMIN:
                logger.warning(f"User '{email}' is already an admin.")
                return
            user.role = UserRole.ADMIN
            logger.info(f"Promoted existing user '{email}' to admin.")
        else:
            db.add(User(
                email=email,
                hashed_password=get_password_hash(password),
                full_name=full_name,
                role=UserRole.ADMIN,
                is_active=True,
            ))
            logger.info(f"Admin user '{email}' created.")
        db.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote an admin account")
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()

    if len(args.password) < 8:
        parser.error("password must be at least 8 characters")
    create_admin_user(args.email, args.password, args.name)
