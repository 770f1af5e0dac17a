"""
BinaryDailySummary model - system-wide binary totals per day, precomputed by the store.
"""
from sqlalchemy import Column, Integer, Date, DECIMAL
from models.base import Base


class BinaryDailySummary(Base):
    __tablename__ = 'binary_daily_summary'

    summaryID = Column(Integer, primary_key=True, autoincrement=True)
    summaryDate = Column(Date, nullable=False, unique=True, index=True)

    totalVolumeGenerated = Column(DECIMAL(14, 2), default=0)
    totalCommissionsPaid = Column(DECIMAL(14, 2), default=0)
    totalAiCostDeducted = Column(DECIMAL(14, 2), default=0)
    totalAdminProfit = Column(DECIMAL(14, 2), default=0)
    totalDirectReferralPaid = Column(DECIMAL(14, 2), default=0)
    totalCommissionLostToCaps = Column(DECIMAL(14, 2), default=0)  # flushed
    netAdminEarnings = Column(DECIMAL(14, 2), default=0)

    totalCyclesCompleted = Column(Integer, default=0)
    totalPurchases = Column(Integer, default=0)

    def __repr__(self):
        return f"<BinaryDailySummary(date={self.summaryDate}, inflow={self.totalVolumeGenerated})>"
