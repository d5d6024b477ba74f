"""
SQLAlchemy ORM Models for Escrow Payments

Defines the transactions table shared by the order and webhook paths.
"""
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TransactionModel(Base):
    """
    ORM model for transactions table.

    Rows are created by the checkout flow; this service attaches the Razorpay
    order id and later records the capture.
    """
    __tablename__ = "transactions"

    transaction_id = Column(String, primary_key=True)
    buyer_email = Column(String, index=True)
    seller_email = Column(String)
    item_description = Column(Text)
    amount = Column(Numeric(12, 2))  # Major currency unit
    currency = Column(String)
    status = Column(String, nullable=False, index=True)
    razorpay_order_id = Column(String, unique=True, index=True)
    razorpay_payment_id = Column(String)
    buyer_confirmed_payment = Column(Boolean, nullable=False, default=False)
    payment_captured_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
