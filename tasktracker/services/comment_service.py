"""Service for task comments."""

import logging

from sqlalchemy.orm import Session

from tasktracker.errors import AuthorizationError
from tasktracker.models.task_comment import TaskComment
from tasktracker.models.user import User

logger = logging.getLogger("tasktracker.tasks")


class CommentService:
    """Comment CRUD; editing and deleting is limited to the author and admins."""

    @staticmethod
    def list_comments(db: Session, task_id: int) -> list[TaskComment]:
        return (
            db.query(TaskComment)
            .filter(TaskComment.task_id == task_id)
            .order_by(TaskComment.created_at.desc(), TaskComment.id.desc())
            .all()
        )

    @staticmethod
    def get_comment(db: Session, task_id: int, comment_id: int) -> TaskComment | None:
        return (
            db.query(TaskComment)
            .filter(TaskComment.id == comment_id, TaskComment.task_id == task_id)
            .first()
        )

    @staticmethod
    def can_modify(comment: TaskComment, actor: User) -> bool:
        return comment.user_id == actor.id or actor.is_admin

    @staticmethod
    def add_comment(db: Session, task_id: int, text: str, author: User) -> TaskComment:
        comment = TaskComment(task_id=task_id, user_id=author.id, comment=text)
        db.add(comment)
        db.commit()
        db.refresh(comment)
        logger.info(f"Comment added: id={comment.id} task={task_id} by={author.id}")
        return comment

    @staticmethod
    def update_comment(db: Session, task_id: int, comment_id: int, text: str, actor: User) -> TaskComment | None:
        comment = CommentService.get_comment(db, task_id, comment_id)
        if comment is None:
            return None
        if not CommentService.can_modify(comment, actor):
            raise AuthorizationError("You can only edit your own comments")
        comment.comment = text
        db.commit()
        db.refresh(comment)
        return comment

    @staticmethod
    def delete_comment(db: Session, task_id: int, comment_id: int, actor: User) -> bool:
        comment = CommentService.get_comment(db, task_id, comment_id)
        if comment is None:
            return False
        if not CommentService.can_modify(comment, actor):
            raise AuthorizationError("You can only delete your own comments")
        db.delete(comment)
        db.commit()
        logger.info(f"Comment deleted: id={comment_id} task={task_id} by={actor.id}")
        return True
