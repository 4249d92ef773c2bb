from unittest.mock import patch
from app.models.profile import Profile, UserRole
from app.models.video import Video
from app.models.analysis import AnalysisSession


def test_setup_admin_bootstrap(client, db_session, test_profile):
    response = client.post("/api/admin/setup")

    assert response.status_code == 200
    assert db_session.query(UserRole).filter(UserRole.role == "admin").count() == 1
    db_session.expire_all()
    assert test_profile.role == "admin"


def test_setup_admin_only_once(client, db_session, test_profile):
    db_session.add(UserRole(user_id="first_admin", role="admin"))
    db_session.commit()

    response = client.post("/api/admin/setup")

    assert response.status_code == 403
    assert db_session.query(UserRole).filter(UserRole.role == "admin").count() == 1


def test_admin_routes_require_admin(client, test_profile):
    for path in ("/api/admin/users", "/api/admin/videos", "/api/admin/coaches", "/api/admin/stats"):
        assert client.get(path).status_code == 403


def test_admin_suspends_and_deletes_users(client, db_session, admin_user, make_coach):
    make_coach()

    response = client.put("/api/admin/users/coach_456", json={"status": "suspended"})
    assert response.status_code == 200
    assert response.json()["status"] == "suspended"

    response = client.get("/api/admin/users?status=suspended")
    assert [user["id"] for user in response.json()] == ["coach_456"]

    response = client.delete("/api/admin/users/coach_456")
    assert response.status_code == 200
    db_session.expire_all()
    assert db_session.get(Profile, "coach_456").status == "deleted"


def test_admin_role_change_adds_grant(client, db_session, admin_user, make_coach):
    make_coach()

    client.put("/api/admin/users/coach_456", json={"role": "admin"})

    roles = {role.role for role in db_session.query(UserRole).filter(UserRole.user_id == "coach_456")}
    assert roles == {"coach", "admin"}


def test_admin_update_unknown_user(client, admin_user):
    assert client.put("/api/admin/users/nobody", json={"status": "suspended"}).status_code == 404


def test_admin_deletes_video(client, db_session, admin_user, make_coach):
    make_coach()
    video = Video(user_id="coach_456", file_path="videos/coach_456/1.mp4", file_name="1.mp4")
    db_session.add(video)
    db_session.commit()
    video_id = video.id

    with patch('app.routers.admin.StorageService') as mock_storage_service:
        mock_storage_service.return_value.delete_file.return_value = True
        response = client.delete(f"/api/admin/videos/{video_id}")

    assert response.status_code == 200
    mock_storage_service.return_value.delete_file.assert_called_once_with("videos/coach_456/1.mp4")
    assert db_session.query(Video).count() == 0


def test_admin_deletes_analysed_video(client, db_session, admin_user, make_coach):
    make_coach()
    video = Video(user_id="coach_456", file_path="videos/coach_456/1.mp4", file_name="1.mp4")
    db_session.add(video)
    db_session.commit()
    video_id = video.id
    db_session.add(AnalysisSession(user_id="coach_456", video_id=video_id, title="Serve review"))
    db_session.commit()

    with patch('app.routers.admin.StorageService') as mock_storage_service:
        mock_storage_service.return_value.delete_file.return_value = True
        response = client.delete(f"/api/admin/videos/{video_id}")

    assert response.status_code == 200
    db_session.expire_all()
    assert db_session.query(Video).count() == 0
    assert db_session.query(AnalysisSession).one().video_id is None


def test_admin_verifies_coach(client, admin_user, make_coach):
    make_coach()

    response = client.put("/api/admin/coaches/coach_456", json={"verified": True})
    assert response.status_code == 200
    assert response.json()["verified"] is True

    response = client.get("/api/admin/coaches?verified=true")
    assert [coach["user_id"] for coach in response.json()] == ["coach_456"]


def test_admin_stats(client, db_session, admin_user, make_coach):
    make_coach()
    db_session.add_all([
        Video(user_id="test_user_123", file_path="videos/test_user_123/1.mp4", file_name="1.mp4", analyzed=True),
        Video(user_id="test_user_123", file_path="videos/test_user_123/2.mp4", file_name="2.mp4"),
        Video(user_id="coach_456", file_path="videos/coach_456/3.mp4", file_name="3.mp4"),
    ])
    db_session.commit()

    response = client.get("/api/admin/stats")

    assert response.status_code == 200
    assert response.json() == {
        "totalUsers": 2,
        "totalCoaches": 1,
        "totalVideos": 3,
        "analyzedVideos": 1,
        "pendingVideos": 2
    }
