# app/models/video_question.py
# Checkpoint source rows: one question bound to a playback timestamp
from sqlalchemy import Column, Integer, Float, Text, JSON, ForeignKey, Index
from app.db.session import Base

class VideoQuestion(Base):
    __tablename__ = "video_questions"

    id = Column(Integer, primary_key=True, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False, index=True)
    timestamp = Column(Float, nullable=False)      # seconds into the video
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)         # ordered list of strings
    correct_answer = Column(Integer, nullable=False)  # index into options
    question_order = Column(Integer, nullable=True)

    __table_args__ = (
        Index('ix_video_questions_video_id_timestamp', 'video_id', 'timestamp'),
    )
