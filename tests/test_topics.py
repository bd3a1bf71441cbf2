import uuid

from fastapi import status
from models import Topic
from services.associations import sync

TOPICS_URL = "/api/topics"


def test_list_topics(client, auth_header, make_user, make_topic):
    user = make_user()
    topic = make_topic(user=user)

    response = client.get(TOPICS_URL, headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total"] == 1
    assert body["data"][0]["id"] == str(topic.id)
    assert body["data"][0]["name"] == topic.name
    assert body["data"][0]["user_id"] == user.id
    assert body["data"][0]["slug"] == topic.slug
    assert body["data"][0]["posts_count"] == 0


def test_list_topics_includes_every_owner_and_live_post_counts(client, db_session, auth_header, make_user, make_topic, make_post):
    user = make_user()
    own = make_topic(user=user)
    other = make_topic()
    trashed = make_topic(user=user)
    live_post = make_post(user=user)
    deleted_post = make_post(user=user)
    sync(db_session, own.id, [live_post.id, deleted_post.id])
    sync(db_session, other.id, [live_post.id])

    client.delete(f"/api/posts/{deleted_post.id}", headers=auth_header(user))
    client.delete(f"{TOPICS_URL}/{trashed.id}", headers=auth_header(user))

    response = client.get(TOPICS_URL, headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total"] == 2
    counts = {item["id"]: item["posts_count"] for item in body["data"]}
    assert counts == {str(own.id): 1, str(other.id): 1}


def test_list_topics_paginates(client, auth_header, make_user, make_topic):
    user = make_user()
    for _ in range(3):
        make_topic(user=user)

    response = client.get(TOPICS_URL, params={"page": 2, "per_page": 2}, headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["total"] == 3
    assert len(body["data"]) == 1
    assert body["current_page"] == 2
    assert body["per_page"] == 2
    assert body["last_page"] == 2


def test_list_topics_requires_authentication(client, make_topic):
    make_topic()

    response = client.get(TOPICS_URL)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_new_topic_template(client, auth_header, make_user):
    user = make_user()

    response = client.get(f"{TOPICS_URL}/create", headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    assert uuid.UUID(response.json()["id"])


def test_get_topic(client, auth_header, make_user, make_topic):
    user = make_user()
    topic = make_topic(user=user)

    response = client.get(f"{TOPICS_URL}/{topic.id}", headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["id"] == str(topic.id)
    assert body["name"] == topic.name
    assert body["user_id"] == user.id
    assert body["slug"] == topic.slug


def test_get_topic_not_found(client, auth_header, make_user):
    user = make_user()

    response = client.get(f"{TOPICS_URL}/not-a-topic", headers=auth_header(user))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.get(f"{TOPICS_URL}/{uuid.uuid4()}", headers=auth_header(user))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_get_topic_of_another_user_is_not_found(client, auth_header, make_user, make_topic):
    owner = make_user()
    stranger = make_user()
    topic = make_topic(user=owner, name="A topic for user 1", slug="a-topic-for-user-1")

    response = client.get(f"{TOPICS_URL}/{topic.id}", headers=auth_header(owner))
    assert response.status_code == status.HTTP_200_OK

    response = client.get(f"{TOPICS_URL}/{topic.id}", headers=auth_header(stranger))
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_create_topic(client, auth_header, make_user):
    user = make_user()
    data = {"id": str(uuid.uuid4()), "name": "A new topic", "slug": "a-new-topic"}

    response = client.post(f"{TOPICS_URL}/{data['id']}", json=data, headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == data["name"]
    assert response.json()["slug"] == data["slug"]
    assert response.json()["user_id"] == user.id

    response = client.get(f"{TOPICS_URL}/{data['id']}", headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == data["name"]
    assert response.json()["slug"] == data["slug"]
    assert response.json()["user_id"] == user.id


def test_create_topic_uses_path_id(client, auth_header, make_user):
    user = make_user()
    path_id = str(uuid.uuid4())

    response = client.post(
        f"{TOPICS_URL}/{path_id}",
        json={"id": str(uuid.uuid4()), "name": "Path wins", "slug": "path-wins"},
        headers=auth_header(user),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == path_id


def test_update_topic(client, db_session, auth_header, make_user, make_topic):
    user = make_user()
    topic = make_topic(user=user)
    data = {"name": "An updated topic", "slug": "an-updated-topic"}

    response = client.post(f"{TOPICS_URL}/{topic.id}", json=data, headers=auth_header(user))
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["id"] == str(topic.id)
    assert response.json()["name"] == data["name"]
    assert response.json()["slug"] == data["slug"]
    assert response.json()["user_id"] == user.id

    db_session.expire_all()
    assert db_session.get(Topic, topic.id).slug == "an-updated-topic"


def test_update_topic_of_another_user_is_not_found(client, db_session, auth_header, make_user, make_topic):
    owner = make_user()
    stranger = make_user()
    topic = make_topic(user=owner, slug="mine")

    response = client.post(
        f"{TOPICS_URL}/{topic.id}",
        json={"name": "Hijacked", "slug": "hijacked"},
        headers=auth_header(stranger),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    db_session.expire_all()
    assert db_session.get(Topic, topic.id).slug == "mine"


def test_invalid_slug_is_rejected(client, auth_header, make_user, make_topic):
    user = make_user()
    topic = make_topic(user=user)

    for slug in ["a new.slug", "with space", "dotted.slug", "trailing\n", " leading"]:
        response = client.post(
            f"{TOPICS_URL}/{topic.id}",
            json={"name": "A new topic", "slug": slug},
            headers=auth_header(user),
        )
        assert response.status_code == 422
        assert "slug" in response.json()["errors"]


def test_missing_name_is_rejected(client, auth_header, make_user):
    user = make_user()

    response = client.post(
        f"{TOPICS_URL}/{uuid.uuid4()}",
        json={"slug": "no-name"},
        headers=auth_header(user),
    )
    assert response.status_code == 422
    assert "name" in response.json()["errors"]


def test_duplicate_slug_is_rejected(client, auth_header, make_user, make_topic):
    user = make_user()
    make_topic(user=user, slug="taken")

    response = client.post(
        f"{TOPICS_URL}/{uuid.uuid4()}",
        json={"name": "Another", "slug": "taken"},
        headers=auth_header(user),
    )
    assert response.status_code == 422
    assert response.json()["errors"]["slug"] == ["The slug has already been taken."]


def test_same_slug_for_different_users(client, auth_header, make_user, make_topic):
    make_topic(slug="shared")
    user = make_user()

    response = client.post(
        f"{TOPICS_URL}/{uuid.uuid4()}",
        json={"name": "Shared", "slug": "shared"},
        headers=auth_header(user),
    )
    assert response.status_code == status.HTTP_200_OK


def test_delete_topic(client, db_session, auth_header, make_user, make_topic):
    owner = make_user()
    stranger = make_user()
    topic = make_topic(user=owner, name="A new topic", slug="a-new-topic")

    response = client.delete(f"{TOPICS_URL}/{topic.id}", headers=auth_header(stranger))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.delete(f"{TOPICS_URL}/not-a-topic", headers=auth_header(owner))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.delete(f"{TOPICS_URL}/{topic.id}", headers=auth_header(owner))
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert response.content == b""

    db_session.expire_all()
    trashed = db_session.get(Topic, topic.id)
    assert trashed is not None
    assert trashed.deleted_at is not None
    assert trashed.slug == "a-new-topic"

    response = client.get(f"{TOPICS_URL}/{topic.id}", headers=auth_header(owner))
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = client.get(TOPICS_URL, headers=auth_header(owner))
    assert response.json()["total"] == 0


def test_deleted_topic_cannot_be_updated(client, auth_header, make_user, make_topic):
    user = make_user()
    topic = make_topic(user=user)
    client.delete(f"{TOPICS_URL}/{topic.id}", headers=auth_header(user))

    response = client.post(
        f"{TOPICS_URL}/{topic.id}",
        json={"name": "Back again", "slug": "back-again"},
        headers=auth_header(user),
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_slug_with_trailing_newline_is_not_stored(client, db_session, auth_header, make_user):
    user = make_user()
    topic_id = uuid.uuid4()

    response = client.post(
        f"{TOPICS_URL}/{topic_id}",
        json={"name": "A new topic", "slug": "a-new-topic\n"},
        headers=auth_header(user),
    )
    assert response.status_code == 422
    assert "slug" in response.json()["errors"]

    db_session.expire_all()
    assert db_session.get(Topic, topic_id) is None


def test_concurrent_duplicate_slug_is_a_validation_error(client, monkeypatch, auth_header, make_user, make_topic):
    user = make_user()
    make_topic(user=user, slug="raced")
    # Another request inserted the slug after this one checked for it
    monkeypatch.setattr("routers.topics.slug_taken", lambda *args, **kwargs: False)

    response = client.post(
        f"{TOPICS_URL}/{uuid.uuid4()}",
        json={"name": "Raced", "slug": "raced"},
        headers=auth_header(user),
    )
    assert response.status_code == 422
    assert response.json()["errors"]["slug"] == ["The slug has already been taken."]
