# app/models/employee.py
# employees: looked up by employee_number when a viewer identifies themselves
from sqlalchemy import Column, Integer, String, DateTime, func
from app.db.session import Base

class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_number = Column(String(32), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
