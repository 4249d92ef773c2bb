from app.models.dashboard import DashboardItem


def test_dashboard_item_lifecycle(client, test_profile):
    response = client.post(
        "/api/dashboard/items",
        json={"title": "Practice serves", "item_type": "goal", "priority": "high"}
    )
    assert response.status_code == 201
    item = response.json()
    assert item["status"] == "pending"

    response = client.put(f"/api/dashboard/items/{item['id']}", json={"status": "in_progress"})
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"

    response = client.get("/api/dashboard/items?item_type=goal")
    assert [entry["title"] for entry in response.json()] == ["Practice serves"]

    response = client.delete(f"/api/dashboard/items/{item['id']}")
    assert response.status_code == 200
    assert client.get("/api/dashboard/items").json() == []


def test_dashboard_item_validation(client, test_profile):
    response = client.post("/api/dashboard/items", json={"title": "x", "priority": "urgent"})

    assert response.status_code == 422


def test_cannot_touch_other_users_items(client, db_session, test_profile):
    item = DashboardItem(user_id="someone_else", title="private")
    db_session.add(item)
    db_session.commit()

    assert client.put(f"/api/dashboard/items/{item.id}", json={"title": "mine"}).status_code == 403
    assert client.delete(f"/api/dashboard/items/{item.id}").status_code == 403
    assert client.get("/api/dashboard/items").json() == []


def test_dashboard_stats(client, db_session, test_profile):
    for status in ("pending", "in_progress", "completed", "completed"):
        db_session.add(DashboardItem(user_id="test_user_123", title=status, status=status))
    db_session.add(DashboardItem(user_id="someone_else", title="other", status="completed"))
    db_session.commit()

    response = client.get("/api/dashboard/stats")

    assert response.status_code == 200
    assert response.json() == {"totalItems": 4, "completedItems": 2, "inProgressItems": 1}
