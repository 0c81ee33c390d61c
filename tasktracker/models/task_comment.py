"""Task comment model."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship

from tasktracker.database import Base
from tasktracker.services.clock import get_current_time

COMMENT_MAX_LENGTH = 1000


class TaskComment(Base):
    """Comment left on a task; the author never changes after creation."""

    __tablename__ = "task_comments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=get_current_time, nullable=False)
    updated_at = Column(DateTime, default=get_current_time, onupdate=get_current_time, nullable=False)

    task = relationship("Task", back_populates="comments")
    user = relationship("User", back_populates="comments", lazy="joined")

    def __repr__(self) -> str:
        """String representation of TaskComment."""
        return f"<TaskComment(id={self.id}, task_id={self.task_id}, user_id={self.user_id})>"


__all__ = ["TaskComment", "COMMENT_MAX_LENGTH"]
