"""
Declarative base shared by the SQLAlchemy models.
Kept separate from the connection module so the models can import it without circular imports.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
