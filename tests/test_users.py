from app.extensions import db
from app.models import User, Enrollment


def test_list_users_requires_admin(client, admin_headers, make_student):
    _, student_headers = make_student()

    assert client.get("/api/users").status_code == 401
    assert client.get("/api/users", headers=student_headers).status_code == 403

    r = client.get("/api/users", headers=admin_headers)
    assert r.status_code == 200
    users = r.get_json()
    root = [u for u in users if u["is_root"]]
    assert len(root) == 1
    assert root[0]["role"] == "admin"
    assert all("password_hash" not in u for u in users)


def test_change_role(app, client, admin_headers, make_student):
    student_id, student_headers = make_student()

    r = client.put(f"/api/users/{student_id}/role", json={"role": "admin"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.get_json()["role"] == "admin"

    # the role is read from the store, so the existing token now has admin rights
    assert client.get("/api/users", headers=student_headers).status_code == 200

    bad = client.put(f"/api/users/{student_id}/role", json={"role": "owner"}, headers=admin_headers)
    assert bad.status_code == 400
    missing = client.put("/api/users/9999/role", json={"role": "student"}, headers=admin_headers)
    assert missing.status_code == 404


def test_delete_user_removes_enrollments(app, client, admin_headers, make_student):
    student_id, student_headers = make_student()
    course_id = client.post("/api/courses", json={"title": "C"}, headers=admin_headers).get_json()["id"]
    client.post("/api/enroll", json={"course_id": course_id}, headers=student_headers)

    r = client.delete(f"/api/users/{student_id}", headers=admin_headers)
    assert r.status_code == 200

    with app.app_context():
        assert db.session.get(User, student_id) is None
        assert Enrollment.query.filter_by(user_id=student_id).count() == 0

    # deleting again is a no-op
    assert client.delete(f"/api/users/{student_id}", headers=admin_headers).status_code == 200


def test_change_role_rejects_non_object_body(client, admin_headers, make_student):
    student_id, _ = make_student()
    r = client.put(f"/api/users/{student_id}/role", json=["admin"], headers=admin_headers)
    assert r.status_code == 400
