# storefront/data/models/product.py
from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Table
from sqlalchemy.orm import relationship

from storefront.data.database import Base

#tabela laczaca kopie tego samego produktu w roznych jezykach
#link jest zapisywany w obie strony (A->B i B->A)
product_localizations = Table(
    "product_localizations",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("localization_id", Integer, ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    locale = Column(String(10), nullable=False, default="en")
    category = Column(String(32), nullable=False, default="eyewear")

    stock = Column(Integer, nullable=True, default=0)
    in_stock = Column(Boolean, nullable=False, default=True)
    is_active = Column(Boolean, nullable=False, default=True)

    price = Column(Numeric(10, 2), nullable=False)
    offer_price = Column(Numeric(10, 2), nullable=True)

    localizations = relationship(
        "ProductModel",
        secondary=product_localizations,
        primaryjoin=id == product_localizations.c.product_id,
        secondaryjoin=id == product_localizations.c.localization_id,
        order_by="ProductModel.id",
    )
