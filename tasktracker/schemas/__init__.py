"""Pydantic schemas for API requests and responses."""

from tasktracker.schemas.common import Envelope, PaginatedEnvelope, Pagination
from tasktracker.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from tasktracker.schemas.task_comment import CommentPayload, CommentResponse
from tasktracker.schemas.user import ProfileUpdate, UserCreate, UserProfile, UserUpdate

__all__ = [
    "CommentPayload",
    "CommentResponse",
    "Envelope",
    "PaginatedEnvelope",
    "Pagination",
    "ProfileUpdate",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserCreate",
    "UserProfile",
    "UserUpdate",
]
