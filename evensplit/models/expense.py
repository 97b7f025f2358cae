from sqlalchemy import Column, Integer, String, Text, ForeignKey, Date, DateTime, Numeric
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from evensplit.db.session import Base

class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(256), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="USD", server_default="USD")
    category = Column(String(100), nullable=True, index=True)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=True, index=True)
    split_mode = Column(String(20), nullable=False, default="equal", server_default="equal")
    payment_mode = Column(String(20), nullable=False, default="single", server_default="single")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    splits = relationship("ExpenseSplit", back_populates="expense", cascade="all, delete-orphan")
    payments = relationship("ExpensePayment", back_populates="expense", cascade="all, delete-orphan")
    history = relationship("ExpenseHistory", back_populates="expense", cascade="all, delete-orphan")
    comments = relationship("ExpenseComment", back_populates="expense", cascade="all, delete-orphan")
