from app.models.community import Article, ForumThread, Question, Answer


def test_article_publish_flow(client, test_profile):
    response = client.post(
        "/api/community/articles",
        json={"title": "Five Drills for Better Footwork!", "content": "...", "tags": ["footwork"]}
    )
    assert response.status_code == 201
    article = response.json()
    assert article["status"] == "draft"
    assert article["published_at"] is None
    assert article["slug"] == f"five-drills-for-better-footwork-{article['id']}"

    # Drafts are not listed
    assert client.get("/api/community/articles").json() == []

    response = client.put(f"/api/community/articles/{article['id']}", json={"status": "published"})
    assert response.status_code == 200
    assert response.json()["published_at"] is not None

    listed = client.get("/api/community/articles").json()
    assert [item["id"] for item in listed] == [article["id"]]


def test_article_views_are_counted(client, db_session, test_profile):
    article = Article(author_id="someone_else", title="Grips", content="...", status="published")
    db_session.add(article)
    db_session.commit()

    client.get(f"/api/community/articles/{article.id}")
    response = client.get(f"/api/community/articles/{article.id}")

    assert response.json()["views"] == 2


def test_other_users_draft_is_hidden(client, db_session, test_profile):
    article = Article(author_id="someone_else", title="Secret", content="...")
    db_session.add(article)
    db_session.commit()

    assert client.get(f"/api/community/articles/{article.id}").status_code == 404
    assert client.put(f"/api/community/articles/{article.id}", json={"title": "Mine"}).status_code == 403


def test_comments(client, db_session, test_profile):
    article = Article(author_id="test_user_123", title="Grips", content="...", status="published")
    db_session.add(article)
    db_session.commit()

    response = client.post(f"/api/community/articles/{article.id}/comments", json={"content": "Great read"})
    assert response.status_code == 201
    parent_id = response.json()["id"]

    response = client.post(
        f"/api/community/articles/{article.id}/comments",
        json={"content": "Agreed", "parent_id": parent_id}
    )
    assert response.status_code == 201

    response = client.post(
        f"/api/community/articles/{article.id}/comments",
        json={"content": "Orphan", "parent_id": 999}
    )
    assert response.status_code == 404

    assert len(client.get(f"/api/community/articles/{article.id}/comments").json()) == 2


def test_duplicate_reaction_conflicts(client, test_profile):
    payload = {"content_type": "article", "content_id": 1, "reaction_type": "like"}

    first = client.post("/api/community/reactions", json=payload)
    second = client.post("/api/community/reactions", json=payload)

    assert first.status_code == 201
    assert second.status_code == 409
    assert "This record already exists." in second.json()["detail"]

    listed = client.get("/api/community/reactions?content_type=article&content_id=1").json()
    assert len(listed) == 1

    assert client.delete(f"/api/community/reactions/{first.json()['id']}").status_code == 200


def test_bookmarks(client, test_profile):
    response = client.post("/api/community/bookmarks", json={"content_type": "question", "content_id": 4})
    assert response.status_code == 201

    assert len(client.get("/api/community/bookmarks").json()) == 1
    assert client.post("/api/community/bookmarks", json={"content_type": "question", "content_id": 4}).status_code == 409

    bookmark_id = response.json()["id"]
    assert client.delete(f"/api/community/bookmarks/{bookmark_id}").status_code == 200
    assert client.get("/api/community/bookmarks").json() == []


def test_invalid_content_type(client, test_profile):
    response = client.post("/api/community/bookmarks", json={"content_type": "video", "content_id": 4})

    assert response.status_code == 422


def test_forum_threads_and_posts(client, db_session, test_profile):
    response = client.post("/api/community/threads", json={"title": "Best rubber for loops?", "content": "..."})
    assert response.status_code == 201
    thread_id = response.json()["id"]

    response = client.post(f"/api/community/threads/{thread_id}/posts", json={"content": "Try tensor rubbers"})
    assert response.status_code == 201
    assert response.json()["is_solution"] is False

    assert len(client.get(f"/api/community/threads/{thread_id}/posts").json()) == 1
    assert client.get(f"/api/community/threads/{thread_id}").json()["views"] == 1
    assert len(client.get("/api/community/threads").json()) == 1


def test_closed_thread_rejects_posts(client, db_session, test_profile):
    thread_id = client.post("/api/community/threads", json={"title": "Closed", "content": "..."}).json()["id"]
    db_session.get(ForumThread, thread_id).status = "closed"
    db_session.commit()

    response = client.post(f"/api/community/threads/{thread_id}/posts", json={"content": "Late reply"})

    assert response.status_code == 400


def test_accept_answer(client, db_session, test_profile):
    question = client.post(
        "/api/community/questions",
        json={"title": "How to fix a late backhand?", "content": "...", "tags": ["backhand"]}
    ).json()

    first = client.post(f"/api/community/questions/{question['id']}/answers", json={"content": "Earlier backswing"}).json()
    second = client.post(f"/api/community/questions/{question['id']}/answers", json={"content": "Stay lower"}).json()

    assert client.post(f"/api/community/answers/{first['id']}/accept").status_code == 200
    response = client.post(f"/api/community/answers/{second['id']}/accept")
    assert response.status_code == 200
    assert response.json()["is_accepted"] is True

    answers = client.get(f"/api/community/questions/{question['id']}/answers").json()
    assert [(answer["id"], answer["is_accepted"]) for answer in answers] == [(second["id"], True), (first["id"], False)]

    refreshed = client.get(f"/api/community/questions/{question['id']}").json()
    assert refreshed["has_accepted_answer"] is True
    assert refreshed["status"] == "answered"


def test_only_question_author_can_accept(client, db_session, test_profile):
    question = Question(author_id="someone_else", title="Grip?", content="...")
    db_session.add(question)
    db_session.commit()
    answer = Answer(question_id=question.id, author_id="test_user_123", content="Shakehand")
    db_session.add(answer)
    db_session.commit()

    response = client.post(f"/api/community/answers/{answer.id}/accept")

    assert response.status_code == 403
