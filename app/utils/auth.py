from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from app.extensions import db
from app.models import User


def current_user():
    identity = get_jwt_identity()
    if identity is None:
        return None
    return db.session.get(User, int(identity))


def role_required(role):
    """Allow the view only when the token's user currently holds `role` in the store."""
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()
            user = current_user()
            if not user:
                return jsonify({"error": "User not found"}), 401
            if user.role != role:
                return jsonify({"error": "Unauthorized"}), 403
            return fn(*args, **kwargs)
        return decorator
    return wrapper


def self_or_admin_required(fn):
    """For /users/<user_id>/... routes: the caller must be that user or an admin."""
    @wraps(fn)
    def decorator(*args, **kwargs):
        verify_jwt_in_request()
        user = current_user()
        if not user:
            return jsonify({"error": "User not found"}), 401
        if user.role != "admin" and user.id != kwargs.get("user_id"):
            return jsonify({"error": "Unauthorized"}), 403
        return fn(*args, **kwargs)
    return decorator


def acting_user_id(requested_id=None):
    """
    Resolve whose progress/enrollment a request acts on.

    Students always act on themselves; admins may name another user.
    Returns (user_id, error_response).
    """
    user = current_user()
    if not user:
        return None, (jsonify({"error": "User not found"}), 401)
    if requested_id in (None, ""):
        return user.id, None
    try:
        requested_id = int(requested_id)
    except (TypeError, ValueError):
        return None, (jsonify({"error": "Invalid user_id"}), 400)
    if requested_id == user.id:
        return user.id, None
    if user.role != "admin":
        return None, (jsonify({"error": "Unauthorized"}), 403)
    if not db.session.get(User, requested_id):
        return None, (jsonify({"error": "User not found"}), 404)
    return requested_id, None
