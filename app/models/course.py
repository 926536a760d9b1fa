from app.extensions import db
from datetime import datetime

class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200))
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    category = db.Column(db.String(120))
    duration = db.Column(db.String(120))
    level = db.Column(db.String(60))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    lessons = db.relationship(
        "Lesson",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="[Lesson.order_index, Lesson.id]"
    )
    enrollments = db.relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")

    @property
    def total_lessons(self):
        return len(self.lessons)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image_url": self.image_url,
            "category": self.category,
            "duration": self.duration,
            "level": self.level,
            "created_at": self.created_at.isoformat() if self.created_at else None
        }
