"""User repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from lms.domain.certificate import PersonSnapshot
from lms.models.user import User
from lms.schemas.user import UserCreate


class UserRepository:
    """Repository for User model. Also serves identity lookups for issuance."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: UUID) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_username(self, username: str) -> User | None:
        return self.db.query(User).filter(User.username == username).first()

    def get_by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def username_or_email_exists(self, username: str, email: str) -> bool:
        return bool(self.get_by_username(username) or self.get_by_email(email))

    def create(self, data: UserCreate) -> User:
        user = User(
            username=data.username,
            email=data.email.lower(),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role.value,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_person(self, user_id: UUID) -> PersonSnapshot | None:
        user = self.get_by_id(user_id)
        if not user:
            return None
        return PersonSnapshot(user_id=user.id, display_name=user.display_name)  # type: ignore[arg-type]
