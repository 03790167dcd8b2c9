"""
Organizational Unit Model with Hierarchy Support.
Three levels: division > department > team. Maintained by the organization
subsystem; this service only reads it.
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base


class UnitLevel(str, enum.Enum):
    DIVISION = "DIVISION"
    DEPARTMENT = "DEPARTMENT"
    TEAM = "TEAM"


class OrgUnit(Base):
    __tablename__ = "org_units"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, nullable=False, unique=True, index=True)  # e.g. "SALES-01"
    name = Column(String, nullable=False)
    level = Column(String, nullable=False, default=UnitLevel.TEAM.value)

    parent_id = Column(Integer, ForeignKey("org_units.id"), nullable=True, index=True)
    manager_id = Column(Integer, ForeignKey("employees.id", use_alter=True, name="fk_org_unit_manager_id"), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    parent = relationship("OrgUnit", remote_side=[id], back_populates="children")
    children = relationship("OrgUnit", back_populates="parent")
    manager = relationship("Employee", foreign_keys=[manager_id], post_update=True)
    members = relationship("Employee", foreign_keys="Employee.unit_id", back_populates="unit")

    def __repr__(self):
        return f"<OrgUnit {self.code} ({self.level})>"
