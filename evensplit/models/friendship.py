from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from evensplit.db.session import Base

FRIEND_PENDING = "pending"
FRIEND_ACCEPTED = "accepted"
FRIEND_DECLINED = "declined"

class Friendship(Base):
    __tablename__ = "friendships"
    __table_args__ = (
        Index("user_friend_idx", "user_id", "friend_id"),
        Index("user_status_idx", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    # user_id sent the request, friend_id received it
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    friend_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=FRIEND_PENDING, server_default=FRIEND_PENDING)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
