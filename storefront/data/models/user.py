from sqlalchemy import Column, Text

from storefront.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    email = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    password = Column(Text, nullable=False)
    country = Column(Text, default="KR", server_default="KR")
