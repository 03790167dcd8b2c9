from sqlalchemy import Column, Integer, String, Text, Boolean
from app.database import Base

class ProcessCategory(Base):
    """Named criterion scored in process_scores; the name is the JSON key."""
    __tablename__ = "process_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
