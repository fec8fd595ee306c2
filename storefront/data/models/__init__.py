#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.product import ProductModel, product_localizations
from storefront.data.models.cart_line import CartLineModel

__all__ = ["UserModel", "ProductModel", "CartLineModel", "product_localizations"]
