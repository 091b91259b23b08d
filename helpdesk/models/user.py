"""
User identity models.

`Profile` mirrors the identity issued by the external auth provider,
`EmployeeRecord` holds the HR details captured on first complaint, and
`AdminUser` records which identities act with admin rights.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from helpdesk.models.base import BaseModel, TimestampMixin
from helpdesk.models.enums import AccountStatus, UserRole, enum_column

__all__ = ["Profile", "EmployeeRecord", "AdminUser"]


class Profile(BaseModel, TimestampMixin):
    """
    Identity profile keyed by the auth provider's user id.

    Attributes:
        email: Login email
        full_name: Display name
        role_type: user, admin or super_admin
        account_status: active, suspended or deactivated
        avatar_url: Optional profile image reference
    """

    __tablename__ = "profiles"

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Login email",
    )
    full_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Display name",
    )
    role_type: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )
    account_status: Mapped[AccountStatus] = mapped_column(
        enum_column(AccountStatus, "account_status"),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role_type in (UserRole.ADMIN, UserRole.SUPER_ADMIN)


class EmployeeRecord(BaseModel, TimestampMixin):
    """Employee details stored in the `users` table, one row per profile."""

    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    employee_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    total_complaints: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class AdminUser(BaseModel, TimestampMixin):
    """Admin-role record for an acting administrator."""

    __tablename__ = "admin_users"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="admin")
