"""Pydantic schemas."""

from dealflow.schemas.common import ToolResponse
from dealflow.schemas.company import CompanyCreate, CompanyRecord, CompanyUpdate
from dealflow.schemas.comment import CommentCreate, CommentRow
from dealflow.schemas.interaction import InteractionCreate, InteractionRow, InteractionUpdate
from dealflow.schemas.query import DashboardStats, FacetConstraints
from dealflow.schemas.vocabulary import (
    ApprovalStatus,
    CompanyRating,
    CompanyStatus,
    InteractionType,
)

__all__ = [
    "ToolResponse",
    "CompanyCreate",
    "CompanyRecord",
    "CompanyUpdate",
    "CommentCreate",
    "CommentRow",
    "InteractionCreate",
    "InteractionRow",
    "InteractionUpdate",
    "DashboardStats",
    "FacetConstraints",
    "ApprovalStatus",
    "CompanyRating",
    "CompanyStatus",
    "InteractionType",
]
