from typing import Optional, List
from sqlalchemy.orm import Session
from storefront.core.exceptions import ProductNotFound
from storefront.models.product import Product

#  Get one product
def get_product_by_id(db: Session, product_id: int) -> Optional[Product]:
    return db.query(Product).filter(Product.id == product_id).first()

def require_product(db: Session, product_id: int) -> Product:
    product = get_product_by_id(db, product_id)
    if product is None:
        raise ProductNotFound()
    return product

#  Catalog listing, newest first
def list_products(db: Session, category: Optional[str] = None) -> List[Product]:
    query = db.query(Product)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()
