import pytest
from app.models.analysis import AnalysisSession
from app.models.subscription import AnalysisUsage
from app.models.video import Video
from app.services.motion_analysis import build_placeholder_result


@pytest.fixture
def analysis_session(db_session, test_profile):
    session = AnalysisSession(user_id="test_user_123", title="Backhand review")
    db_session.add(session)
    db_session.commit()
    db_session.refresh(session)
    return session


def test_placeholder_result_content():
    session = AnalysisSession(id=7, title="Serve review")

    result = build_placeholder_result(session, "footwork")

    assert result.session_id == 7
    assert result.analysis_type == "footwork"
    assert result.score == 0.75
    assert "Serve review" in result.feedback
    assert result.areas_of_improvement


def test_placeholder_result_unknown_type_falls_back():
    result = build_placeholder_result(AnalysisSession(id=1, title="x"), "spin")

    assert result.analysis_type == "technique"


def test_create_and_list_sessions(client, db_session, test_profile):
    video = Video(user_id="test_user_123", file_path="videos/test_user_123/1.mp4", file_name="1.mp4")
    db_session.add(video)
    db_session.commit()

    response = client.post(
        "/api/analysis-sessions",
        json={"title": "Loop review", "video_id": video.id, "coach_id": "coach_456"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["analysis_status"] == "pending"
    assert data["results"] == []

    response = client.get("/api/analysis-sessions")
    assert [session["title"] for session in response.json()] == ["Loop review"]


def test_create_session_for_foreign_video(client, db_session, test_profile):
    video = Video(user_id="someone_else", file_path="videos/someone_else/1.mp4", file_name="1.mp4")
    db_session.add(video)
    db_session.commit()

    response = client.post("/api/analysis-sessions", json={"title": "Nope", "video_id": video.id})

    assert response.status_code == 403


def test_session_visible_to_assigned_coach(client, db_session, test_profile):
    session = AnalysisSession(user_id="player_2", coach_id="test_user_123", title="Coached")
    db_session.add(session)
    db_session.commit()

    assert client.get(f"/api/analysis-sessions/{session.id}").status_code == 200
    assert client.delete(f"/api/analysis-sessions/{session.id}").status_code == 403


def test_session_hidden_from_others(client, db_session, test_profile):
    session = AnalysisSession(user_id="player_2", title="Private")
    db_session.add(session)
    db_session.commit()

    assert client.get(f"/api/analysis-sessions/{session.id}").status_code == 403


def test_update_and_delete_session(client, db_session, analysis_session):
    response = client.put(f"/api/analysis-sessions/{analysis_session.id}", json={"description": "Focus on elbow"})
    assert response.status_code == 200
    assert response.json()["description"] == "Focus on elbow"

    response = client.delete(f"/api/analysis-sessions/{analysis_session.id}")
    assert response.status_code == 200
    assert db_session.query(AnalysisSession).count() == 0


def test_analyze_records_usage(client, db_session, analysis_session, make_subscription):
    make_subscription(limit=5)

    response = client.post(f"/api/analysis-sessions/{analysis_session.id}/analyze", json={"analysis_type": "posture"})

    assert response.status_code == 201
    assert response.json()["analysis_type"] == "posture"
    assert db_session.query(AnalysisUsage).count() == 1

    session = client.get(f"/api/analysis-sessions/{analysis_session.id}").json()
    assert session["analysis_status"] == "completed"
    assert len(session["results"]) == 1


def test_analyze_blocked_by_quota(client, db_session, analysis_session, make_subscription):
    make_subscription(limit=1)
    client.post(f"/api/analysis-sessions/{analysis_session.id}/analyze", json={})

    response = client.post(f"/api/analysis-sessions/{analysis_session.id}/analyze", json={})

    assert response.status_code == 403
    assert response.json()["detail"]["canProceed"] is False
    assert db_session.query(AnalysisUsage).count() == 1


def test_analyze_without_subscription(client, analysis_session):
    response = client.post(f"/api/analysis-sessions/{analysis_session.id}/analyze", json={})

    assert response.status_code == 403


def test_frames_and_annotations(client, analysis_session):
    base = f"/api/analysis-sessions/{analysis_session.id}"

    response = client.post(f"{base}/frames", json={"frame_number": 12, "timestamp_ms": 480, "technique_notes": "contact"})
    assert response.status_code == 201
    frame_id = response.json()["id"]

    response = client.post(
        f"{base}/annotations",
        json={"annotation_type": "arrow", "coordinates": {"x1": 0, "y1": 0, "x2": 10, "y2": 5}, "frame_id": frame_id}
    )
    assert response.status_code == 201
    assert response.json()["color"] == "#FF0000"

    assert len(client.get(f"{base}/frames").json()) == 1
    assert client.get(f"{base}/annotations").json()[0]["coordinates"]["x2"] == 10


def test_annotation_with_unknown_frame(client, analysis_session):
    response = client.post(
        f"/api/analysis-sessions/{analysis_session.id}/annotations",
        json={"annotation_type": "circle", "coordinates": [1, 2, 3], "frame_id": 999}
    )

    assert response.status_code == 404
