from app.extensions import db
from datetime import datetime
import math

class UserProgress(db.Model):
    """A row means the user completed the lesson; no row means not completed."""
    __tablename__ = "user_progress"
    __table_args__ = (
        db.UniqueConstraint("user_id", "lesson_id", name="uq_progress_user_lesson"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    lesson_id = db.Column(db.Integer, db.ForeignKey("lessons.id"), nullable=False)
    completed_at = db.Column(db.DateTime, default=datetime.utcnow)

    student = db.relationship("User", back_populates="progress")
    lesson = db.relationship("Lesson", back_populates="progress")


def progress_percent(completed, total):
    """Completed/total as an integer percent, rounding halves up."""
    if not total:
        return 0
    return int(math.floor(completed * 100 / total + 0.5))
