from sqlalchemy import Column, Integer, String
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class Service(Base, TimestampMixin):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    def __repr__(self):
        return f"<Service id={self.id} slug={self.slug}>"
