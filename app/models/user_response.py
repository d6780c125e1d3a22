# app/models/user_response.py
# AnswerEvent rows (append-only)
from sqlalchemy import Column, Integer, Boolean, Text, DateTime, ForeignKey, Index, func
from app.db.session import Base

class UserResponse(Base):
    __tablename__ = "user_responses"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False)
    question_id = Column(Integer, ForeignKey("video_questions.id"), nullable=False)
    selected_answer = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False)
    attempt_number = Column(Integer, nullable=False)  # 1 or 2
    answered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index('ix_user_responses_employee_id_video_id', 'employee_id', 'video_id'),
    )
