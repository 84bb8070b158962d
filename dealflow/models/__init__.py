"""SQLAlchemy ORM models."""

from dealflow.models.company import Base, Company
from dealflow.models.interaction import Interaction
from dealflow.models.comment import Comment

__all__ = ["Base", "Company", "Interaction", "Comment"]
