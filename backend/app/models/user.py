"""
Blog Backend — User SQLAlchemy Model
======================================

What:  ORM model for the `users` table plus the rules a user must satisfy.
Who:   Used by UserService for signup/update, and referenced by Post and
       Comment through foreign keys.

Validation happens at two independent points:
    1. `User.validate()` — field constraints (name length, email shape,
       role membership). Called by the signup path; the update path skips it
       unless the caller asks for it.
    2. `before_insert` hook — rejects names of 2 characters or fewer when the
       row is actually inserted, whether or not validate() ran.

Both checks stay: they reject the same names on signup, but only the hook
guards inserts that bypass validate().
"""

from typing import List, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.exceptions import ValidationError
from app.models.mixins import TimestampMixin

ROLES = ("user", "admin")

NAME_MIN_LENGTH = 3
PASSWORD_MIN_LENGTH = 7


class User(TimestampMixin, Base):
    """
    A registered blog user.

    Lifecycle:
        1. Created by signup (validated, then inserted through the hook)
        2. Mutated by update (no validation)
        3. Never deleted
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # UNIQUE in the store, so a duplicate insert fails even if two signups
    # pass the lookup concurrently
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)

    # Plain string column: the update path may store a value outside ROLES
    role: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)

    posts: Mapped[List["Post"]] = relationship(back_populates="author")  # noqa: F821
    comments: Mapped[List["Comment"]] = relationship(back_populates="author")  # noqa: F821

    def validate(self) -> None:
        """
        Check every field constraint and raise one ValidationError listing all
        failures. Null fields are not checked.
        """
        errors = []

        if self.name is not None and len(self.name) < NAME_MIN_LENGTH:
            errors.append("Name must be at least 3 characters long.")

        if self.email is not None and not is_valid_email(self.email):
            errors.append("Email must be valid.")

        if self.role is not None and self.role not in ROLES:
            errors.append(f"Role must be one of: {', '.join(ROLES)}.")

        if errors:
            raise ValidationError.from_errors(errors)

    def check_password_length(self, password: str) -> None:
        """Raises ValidationError for passwords of 6 characters or fewer."""
        if len(password) < PASSWORD_MIN_LENGTH:
            raise ValidationError(
                message="Password length must be greater than 6 characters.",
                field="password",
            )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"


def is_valid_email(value: str) -> bool:
    """
    Syntax-only check; no DNS lookups.

    Addresses under the reserved `.test` domain are accepted; other
    special-use names (`.local`, `.localhost`, `.invalid`) are not.
    """
    try:
        validate_email(value, check_deliverability=False, test_environment=True)
    except EmailNotValidError:
        return False
    return True


@event.listens_for(User, "before_insert")
def reject_short_names(mapper, connection, target: User) -> None:
    """Pre-insert hook: the name must be longer than 2 characters."""
    if target.name is None or len(target.name) <= 2:
        raise ValidationError(
            message="Name must be greater than 2 characters.",
            field="name",
        )
