"""
AppSetting model - flat key/value settings table.
Values are always strings; typed parsing happens in affiliate_system.config.settings.
"""
from sqlalchemy import Column, String, DateTime
from models.base import Base, _get_current_time


class AppSetting(Base):
    __tablename__ = 'app_settings'

    key = Column(String(100), primary_key=True)
    value = Column(String, nullable=True)  # e.g. "35", "true", "11960"

    updatedAt = Column(DateTime, default=_get_current_time, onupdate=_get_current_time)

    def __repr__(self):
        return f"<AppSetting(key={self.key}, value={self.value})>"
