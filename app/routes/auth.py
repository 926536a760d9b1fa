from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import create_access_token, jwt_required
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from app.extensions import db
from app.models import User
from app.utils.auth import current_user
from app.utils.request_data import json_object
from app.utils.mailer import send_email
import smtplib
import uuid

bp = Blueprint("auth", __name__)


def _send_verification(user):
    """Email the verification link; returns False (and logs) when dispatch fails."""
    verify_link = f"{current_app.config['CLIENT_URL'].rstrip('/')}/verify-email?token={user.verification_token}"
    try:
        send_email(
            to=user.email,
            subject="Verify Your Email",
            template="verify_email",
            name=user.name,
            verify_link=verify_link
        )
    except (smtplib.SMTPException, OSError) as e:
        current_app.logger.warning(f"Verification email to {user.email} not sent: {e}")
        return False
    return True


@bp.route("/register", methods=["POST"])
def register():
    data = json_object()
    name = (data.get("name") or "").strip()
    email = (data.get("email") or "").strip().lower()
    password = data.get("password")

    if not all([name, email, password]):
        return jsonify({"error": "Missing required fields"}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already exists."}), 409

    user = User(
        name=name,
        email=email,
        role="student",
        status="unverified",
        verification_token=uuid.uuid4().hex
    )
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify({"error": "Email already exists."}), 409

    email_sent = _send_verification(user)

    return jsonify({
        "success": True,
        "email_sent": email_sent,
        "message": (
            "Registration successful. Please check your email to verify your account."
            if email_sent
            else "Registration successful, but we could not send the verification email."
        )
    }), 201


@bp.route("/resend-verification", methods=["POST"])
def resend_verification():
    data = json_object()
    email = (data.get("email") or "").strip().lower()

    if not email:
        return jsonify({"error": "Email is required"}), 400

    user = User.query.filter_by(email=email).first()
    if not user:
        return jsonify({"error": "No registration found for this email."}), 404

    if user.is_verified:
        return jsonify({"error": "This email is already verified. Please log in."}), 400

    user.verification_token = uuid.uuid4().hex
    db.session.commit()

    if not _send_verification(user):
        return jsonify({"error": "Unable to send verification email at the moment"}), 500

    return jsonify({"success": True, "message": "A new verification link has been sent to your email."}), 200


@bp.route("/verify-email", methods=["GET"])
def verify_email():
    token = (request.args.get("token") or "").strip()
    if not token:
        return jsonify({"error": "Invalid or expired token"}), 400

    # Status flip and token consumption happen in one conditional UPDATE
    result = db.session.execute(
        update(User)
        .where(User.verification_token == token, User.status == "unverified")
        .values(status="verified", verification_token=None)
    )
    db.session.commit()

    if result.rowcount != 1:
        return jsonify({"error": "Invalid or expired token"}), 400

    return jsonify({"success": True, "message": "Email verified successfully."}), 200


@bp.route("/login", methods=["POST"])
def login():
    data = json_object()
    if not data:
        return jsonify({"error": "Missing JSON data"}), 400

    email = (data.get("email") or "").strip().lower()
    password = data.get("password")

    user = User.query.filter_by(email=email).first()

    if not user or not user.check_password(password):
        return jsonify({"error": "Invalid credentials"}), 401

    if not user.is_verified and user.role != "admin":
        return jsonify({"error": "Please verify your email before logging in"}), 403

    access_token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role}
    )

    return jsonify({
        "success": True,
        "access_token": access_token,
        "user": user.to_dict()
    }), 200


@bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = current_user()
    if not user:
        return jsonify({"error": "User not found"}), 404
    return jsonify(user.to_dict()), 200
