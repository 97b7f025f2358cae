from sqlalchemy import Column, Integer, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from evensplit.db.session import Base

class ExpensePayment(Base):
    __tablename__ = "expense_payments"
    __table_args__ = (UniqueConstraint("expense_id", "user_id", name="uq_payment_user"),)

    id = Column(Integer, primary_key=True, index=True)
    expense_id = Column(Integer, ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    percentage = Column(Numeric(5, 2), nullable=True)

    expense = relationship("Expense", back_populates="payments")
