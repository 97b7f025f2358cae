from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from evensplit.db.session import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    display_name = Column(String(50), nullable=True)
    password_hash = Column(String, nullable=False)
    refresh_token = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def label(self) -> str:
        return self.display_name or self.name or self.email or str(self.id)
