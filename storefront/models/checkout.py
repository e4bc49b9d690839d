from sqlalchemy import Column, Integer, String, Enum, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime
from storefront.db.session import Base
import enum

class CheckoutSessionStatus(str, enum.Enum):
    OPEN = "OPEN"              # Buyer sent to the hosted payment page
    COMPLETED = "COMPLETED"    # Payment confirmed, order materialized
    FAILED = "FAILED"          # Payment confirmed but no order could be made

class CheckoutSession(Base):
    """Local record of a payment provider session created for a cart"""
    __tablename__ = "checkout_sessions"

    id = Column(Integer, primary_key=True, index=True)
    provider_session_id = Column(String(255), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)
    cart_id = Column(Integer, nullable=False)
    amount_total = Column(Integer, nullable=False)  # minor currency units
    currency = Column(String(10), nullable=False)
    status = Column(Enum(CheckoutSessionStatus), nullable=False, default=CheckoutSessionStatus.OPEN)
    failure_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    order = relationship("Order", back_populates="checkout_session", uselist=False)
