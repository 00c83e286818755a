from sqlalchemy import Column, Integer, String, Numeric
from app.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True)
    address = Column(String(512), nullable=True)
    current_balance = Column(Numeric(12, 2), default=0)  # positive = customer owes the shop
