from .user import User
from .course import Course
from .lesson import Lesson, LessonFile
from .enrollment import Enrollment
from .progress import UserProgress, progress_percent

__all__ = ["User", "Course", "Lesson", "LessonFile", "Enrollment", "UserProgress", "progress_percent"]
