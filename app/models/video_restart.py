# app/models/video_restart.py
# RestartEvent rows (append-only, restart_count is 1-based)
from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from app.db.session import Base

class VideoRestart(Base):
    __tablename__ = "video_restarts"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False)
    restart_count = Column(Integer, nullable=False)
    restarted_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
