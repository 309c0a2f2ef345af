from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, email: str) -> UserModel | None:
        return self.db.get(UserModel, email)

    def get_user_by_credentials(self, email: str, password: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(UserModel.email == email, UserModel.password == password)
        ).scalar_one_or_none()

    def create_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def rollback(self):
        self.db.rollback()
