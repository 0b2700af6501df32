# ============================================================================
# FILE: tunetip/services/user_service.py
# ============================================================================
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from tunetip.core.exceptions import NotFoundError
from tunetip.db.models.user import User

class UserService:
    """Read-only user lookups used by the collaborator registry"""

    def find_by_username(self, db: Session, username: str) -> Optional[User]:
        return db.query(User).filter(User.username == username).first()

    def find_by_email(self, db: Session, email: str) -> Optional[User]:
        """Emails compare case-insensitively"""
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def resolve_identifier(self, db: Session, identifier: str) -> User:
        """
        Resolve an invite identifier to a user.

        Anything containing '@' is treated as an email, everything else as a
        username. Surrounding whitespace is ignored.
        """
        trimmed = identifier.strip()
        lookup = self.find_by_email if "@" in trimmed else self.find_by_username
        user = lookup(db, trimmed)
        if user is None:
            raise NotFoundError(f"User {trimmed} not found")
        return user

# Create singleton instance
user_service = UserService()
