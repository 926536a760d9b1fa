from app.extensions import db
from datetime import datetime
from app.utils.file_store import normalize_file_url

class Lesson(db.Model):
    __tablename__ = "lessons"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    course = db.relationship("Course", back_populates="lessons")
    files = db.relationship(
        "LessonFile",
        back_populates="lesson",
        cascade="all, delete-orphan",
        order_by="LessonFile.id"
    )
    progress = db.relationship("UserProgress", back_populates="lesson", cascade="all, delete-orphan")

    def to_dict(self, include_files=False):
        data = {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "content": self.content,
            "order_index": self.order_index,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
        if include_files:
            data["files"] = [f.to_dict() for f in self.files]
        return data


class LessonFile(db.Model):
    __tablename__ = "lesson_files"

    id = db.Column(db.Integer, primary_key=True)
    lesson_id = db.Column(db.Integer, db.ForeignKey("lessons.id"), nullable=False, index=True)
    file_path = db.Column(db.String(500), nullable=False)
    file_type = db.Column(db.String(20), nullable=False, default="doc")
    original_name = db.Column(db.String(255))
    size = db.Column(db.Integer, nullable=True)       # bytes
    duration = db.Column(db.Float, nullable=True)     # seconds, videos only
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    lesson = db.relationship("Lesson", back_populates="files")

    def to_dict(self):
        return {
            "id": self.id,
            "lesson_id": self.lesson_id,
            "file_path": normalize_file_url(self.file_path),
            "file_type": self.file_type,
            "original_name": self.original_name,
            "size": self.size,
            "duration": self.duration
        }
