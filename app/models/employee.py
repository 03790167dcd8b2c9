from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    employee_number = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=True)
    position = Column(String, nullable=True)

    # Finest unit the employee belongs to (usually a team)
    unit_id = Column(Integer, ForeignKey("org_units.id"), nullable=True, index=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    unit = relationship("OrgUnit", foreign_keys=[unit_id], back_populates="members")

    def __repr__(self):
        return f"<Employee {self.employee_number}: {self.name}>"
