from sqlalchemy import Column, Integer, String, Float, Text, Boolean
from app.database import Base

class GrowthCategory(Base):
    __tablename__ = "growth_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    coefficient = Column(Float, default=1.0, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
