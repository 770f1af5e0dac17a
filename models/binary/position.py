"""
BinaryPosition model - a participant's place in the binary network.
leftVolume/rightVolume accumulate externally; this code only reads them.
"""
from sqlalchemy import Column, Integer, DECIMAL, DateTime
from models.base import Base, _get_current_time


class BinaryPosition(Base):
    __tablename__ = 'binary_network'

    userID = Column(Integer, primary_key=True)

    leftVolume = Column(DECIMAL(12, 2), default=0)
    rightVolume = Column(DECIMAL(12, 2), default=0)
    totalCycles = Column(Integer, default=0)

    joinedAt = Column(DateTime, default=_get_current_time)

    def __repr__(self):
        return f"<BinaryPosition(userID={self.userID}, left={self.leftVolume}, right={self.rightVolume})>"
