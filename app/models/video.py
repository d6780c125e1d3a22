# app/models/video.py
from sqlalchemy import Column, Integer, String, Text, DateTime, func
from app.db.session import Base

class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    video_url = Column(Text, nullable=False)
    title = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
