from flask import Blueprint, jsonify, current_app
from app.extensions import db
from app.models import User
from app.models.user import USER_ROLES
from app.utils.auth import role_required
from app.utils.request_data import json_object

bp = Blueprint("users", __name__)


@bp.route("", methods=["GET"])
@role_required("admin")
def list_users():
    users = User.query.order_by(User.id).all()
    return jsonify([
        {
            "id": u.id,
            "name": u.name,
            "email": u.email,
            "role": u.role,
            "status": u.status,
            "is_root": u.is_root
        }
        for u in users
    ]), 200


# Root-admin protection is left to the admin console; see DESIGN.md.
@bp.route("/<int:user_id>/role", methods=["PUT"])
@role_required("admin")
def change_role(user_id):
    data = json_object()
    role = data.get("role")

    if role not in USER_ROLES:
        return jsonify({"error": f"Invalid role. Must be one of {list(USER_ROLES)}"}), 400

    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"error": "User not found"}), 404

    user.role = role
    db.session.commit()
    current_app.logger.info(f"Role of user {user.id} changed to {role}")

    return jsonify({"success": True, "id": user.id, "role": user.role}), 200


@bp.route("/<int:user_id>", methods=["DELETE"])
@role_required("admin")
def delete_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({"success": True}), 200

    # enrollments and progress go with the user (ORM cascade)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info(f"Deleted user {user_id}")

    return jsonify({"success": True}), 200
