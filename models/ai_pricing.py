"""
AIProviderPricing model - per-provider AI cost rates in USD.
"""
from sqlalchemy import Column, Integer, String, DECIMAL
from models.base import Base


class AIProviderPricing(Base):
    __tablename__ = 'ai_provider_pricing'

    pricingID = Column(Integer, primary_key=True, autoincrement=True)
    providerName = Column(String, nullable=False)
    modelName = Column(String, nullable=True)

    # All NULL-able: a provider prices only the media it supports
    inputCostPer1k = Column(DECIMAL(12, 6), nullable=True)
    outputCostPer1k = Column(DECIMAL(12, 6), nullable=True)
    imageCost = Column(DECIMAL(12, 6), nullable=True)
    videoCostPerSecond = Column(DECIMAL(12, 6), nullable=True)
    audioCostPerMinute = Column(DECIMAL(12, 6), nullable=True)

    def __repr__(self):
        return f"<AIProviderPricing(provider={self.providerName}, model={self.modelName})>"
