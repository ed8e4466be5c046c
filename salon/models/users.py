"""
Users SQLAlchemy model.
"""

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint

from salon.db.postgres_bootstrap import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), CheckConstraint("email LIKE '%@%.%'"), unique=True, nullable=False)
    avatar = Column(String(512), nullable=True)
    provider = Column(String(32), nullable=False, server_default="local")  # local, google, facebook
    verified = Column(Boolean, nullable=False, server_default="false")
    is_admin = Column(Boolean, nullable=False, server_default="false")

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    review = relationship("Review", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, name={self.name}, email={self.email}, verified={self.verified}, is_admin={self.is_admin})>"
