"""
Profile, employee record and admin-user repositories.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from helpdesk.models.enums import AccountStatus
from helpdesk.models.user import AdminUser, EmployeeRecord, Profile
from helpdesk.repositories.base_repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):

    def __init__(self, session: Session):
        super().__init__(Profile, session)

    def find_by_email(self, email: str) -> Optional[Profile]:
        return self.find_one_by_criteria({"email": email})

    def list_profiles(self, account_status: Optional[AccountStatus] = None) -> List[Profile]:
        stmt = select(Profile).order_by(Profile.full_name)
        if account_status is not None:
            stmt = stmt.where(Profile.account_status == account_status)
        return list(self.db.scalars(stmt))


class EmployeeRecordRepository(BaseRepository[EmployeeRecord]):

    def __init__(self, session: Session):
        super().__init__(EmployeeRecord, session)

    def find_by_user_id(self, user_id: str) -> Optional[EmployeeRecord]:
        return self.find_one_by_criteria({"user_id": user_id})


class AdminUserRepository(BaseRepository[AdminUser]):

    def __init__(self, session: Session):
        super().__init__(AdminUser, session)

    def find_by_user_id(self, user_id: str) -> Optional[AdminUser]:
        return self.find_one_by_criteria({"user_id": user_id})
