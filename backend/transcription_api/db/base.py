"""Singleton declarative base.

The rest of the codebase can simply do

    from transcription_api.db.base import Base

to declare ORM models.  Keeping the base in one place ensures that
``Base.metadata.create_all(bind=engine)`` sees every mapped class.
"""

from sqlalchemy.orm import declarative_base

# The global declarative base instance used by every model
Base = declarative_base()

__all__ = ["Base"]
