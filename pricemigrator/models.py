from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
BigIntId = BigInteger().with_variant(Integer, "sqlite")


class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    products = relationship("Product", back_populates="category")


class Product(Base):
    __tablename__ = "products"
    id = Column(BigIntId, primary_key=True)
    url = Column(String, unique=True, nullable=False)
    category_id = Column(
        Integer,
        ForeignKey("categories.id"),
        nullable=False,
    )
    category = relationship("Category", back_populates="products")
    prices = relationship("ProductPrice", back_populates="product")


class ProductPrice(Base):
    __tablename__ = "product_prices"
    __table_args__ = (
        Index("idx_product_prices_product_id_date", "product_id", "date"),
    )
    id = Column(BigIntId, primary_key=True)
    product_id = Column(
        BigIntId,
        ForeignKey("products.id"),
        nullable=False,
    )
    date = Column(DateTime(timezone=True), nullable=False)
    price = Column(Integer, nullable=False)
    product = relationship("Product", back_populates="prices")
