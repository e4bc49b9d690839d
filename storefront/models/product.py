from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, JSON
from sqlalchemy.sql import func
from storefront.db.session import Base

ONE_SIZE = "ONE SIZE"

class Product(Base):
    """Catalog entry. Managed outside this service; read only here."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String, nullable=True)
    category = Column(String, nullable=False, index=True)
    sizes = Column(JSON, default=list)  # ordered size labels, empty for one-size items
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def accepts_size(self, size: str) -> bool:
        if self.sizes:
            return size in self.sizes
        return size == ONE_SIZE
