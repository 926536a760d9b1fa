from app.extensions import db
from datetime import datetime
from flask import current_app
from werkzeug.security import generate_password_hash, check_password_hash

USER_ROLES = ("student", "admin")

class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.Enum(*USER_ROLES, name="user_role"), nullable=False, default="student")

    # unverified --(valid token)--> verified; the token is cleared in the same UPDATE
    status = db.Column(
        db.Enum("unverified", "verified", name="user_status"),
        nullable=False,
        default="unverified"
    )
    verification_token = db.Column(db.String(64), unique=True, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    enrollments = db.relationship("Enrollment", back_populates="student", cascade="all, delete-orphan")
    progress = db.relationship("UserProgress", back_populates="student", cascade="all, delete-orphan")

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not password:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_verified(self):
        return self.status == "verified"

    @property
    def is_root(self):
        return self.email == current_app.config["ROOT_ADMIN_EMAIL"].strip().lower()

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role
        }

    def __repr__(self):
        return f"<User {self.email}>"
