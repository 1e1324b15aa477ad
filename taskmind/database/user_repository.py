"""Repository for User profile operations."""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from taskmind.models.user import User
from taskmind.database.models import UserDB

logger = logging.getLogger(__name__)

# Columns overwritten when an existing user is saved again
PROFILE_FIELDS = ("email", "name", "course", "semester", "birth_date", "phone", "updated_at")


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        user_db = self.db.get(UserDB, user_id)
        return user_db.to_pydantic() if user_db else None

    def create_or_update(self, user: User) -> User:
        """Insert ``user``, or overwrite its stored profile fields if it exists."""
        user_db = self.db.get(UserDB, user.id)
        action = "Updated" if user_db else "Created"
        if user_db is None:
            user_db = UserDB.from_pydantic(user)
            self.db.add(user_db)
        else:
            for field in PROFILE_FIELDS:
                setattr(user_db, field, getattr(user, field))

        try:
            self.db.commit()
            self.db.refresh(user_db)
            logger.debug(f"{action} user {user.id}: {user.email}")
            return user_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save user {user.id}: {type(e).__name__}: {str(e)}")
            raise
