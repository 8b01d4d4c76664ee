# backend/create_admin.py
"""Create (or promote) an administrator account.

Administrators cannot sign up through the API, so the first one is created here:

    python create_admin.py <username> <password>
"""
import argparse
import logging

from sqlalchemy.orm import Session

from database import SessionLocal, init_db
from models.enums import UserRole
from models.users import User
from utils.hashing import get_password_hash

logger = logging.getLogger(__name__)


def create_admin(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if user:
        logger.info("Promoting existing user %s to Admin", username)
    else:
        user = User(username=username)
        db.add(user)

    user.password_hash = get_password_hash(password)
    user.role = UserRole.ADMIN.value
    user.is_approved = True
    user.is_blocked = False
    user.block_reason = ""
    db.commit()
    db.refresh(user)
    return user


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create or promote an administrator account.")
    parser.add_argument("username")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters long")

    logging.basicConfig(level=logging.INFO)
    init_db()
    session = SessionLocal()
    try:
        user = create_admin(session, args.username, args.password)
        logger.info("Administrator %s ready (id=%s)", user.username, user.id)
    finally:
        session.close()


if __name__ == "__main__":
    main()
