from sqlalchemy import Column, Integer, String, Text

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    # cena w najmniejszej jednostce waluty (np. won), zawsze int
    price = Column(Integer, nullable=False)
    description = Column(Text)
    category = Column(Text)
    imageUrl = Column(String)

    def to_snapshot(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "category": self.category,
            "imageUrl": self.imageUrl,
        }
