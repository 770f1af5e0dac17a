"""
BinaryDailyEarning model - what one participant earned on one day (daily cap input).
"""
from sqlalchemy import Column, Integer, Date, DECIMAL, UniqueConstraint
from models.base import Base


class BinaryDailyEarning(Base):
    __tablename__ = 'binary_daily_earnings'
    __table_args__ = (
        UniqueConstraint('userID', 'earningDate', name='uq_daily_earning_user_date'),
    )

    earningID = Column(Integer, primary_key=True, autoincrement=True)
    userID = Column(Integer, nullable=False, index=True)
    earningDate = Column(Date, nullable=False, index=True)

    totalEarned = Column(DECIMAL(12, 2), default=0)
    cyclesCompleted = Column(Integer, default=0)

    def __repr__(self):
        return f"<BinaryDailyEarning(userID={self.userID}, date={self.earningDate}, earned={self.totalEarned})>"
