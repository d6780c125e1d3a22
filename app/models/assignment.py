# app/models/assignment.py
from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from app.db.session import Base

class EmployeeVideoAssignment(Base):
    __tablename__ = "employee_video_assignments"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    video_id = Column(Integer, ForeignKey("videos.id"), nullable=False)

    __table_args__ = (
        UniqueConstraint('employee_id', 'video_id', name='uq_employee_video_assignment'),
    )
