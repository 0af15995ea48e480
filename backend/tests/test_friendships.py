import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from journal_api.models import Friendship


def _request(client: TestClient, sender: dict, username: str):
    return client.post("/api/v1/friends/requests", json={"username": username}, headers=sender["headers"])


def test_request_accept_and_list_friends(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")

    sent = _request(client, alice, "bob")
    assert sent.status_code == 201
    friendship = sent.json()
    assert friendship["status"] == "pending"
    assert friendship["requester"]["username"] == "alice"
    assert friendship["recipient"]["username"] == "bob"
    assert friendship["notifications_enabled"] is True

    incoming = client.get("/api/v1/friends/requests/incoming", headers=bob["headers"]).json()
    assert [f["requester"]["username"] for f in incoming] == ["alice"]
    outgoing = client.get("/api/v1/friends/requests/outgoing", headers=alice["headers"]).json()
    assert [f["recipient"]["username"] for f in outgoing] == ["bob"]
    assert client.get("/api/v1/friends/", headers=alice["headers"]).json() == []

    accepted = client.post("/api/v1/friends/requests/alice/accept", headers=bob["headers"])
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    assert [u["username"] for u in client.get("/api/v1/friends/", headers=alice["headers"]).json()] == ["bob"]
    assert [u["username"] for u in client.get("/api/v1/friends/", headers=bob["headers"]).json()] == ["alice"]
    assert client.get("/api/v1/friends/requests/incoming", headers=bob["headers"]).json() == []


def test_request_validation(client: TestClient, register) -> None:
    alice = register("alice")
    register("bob")

    assert _request(client, alice, "ghost").status_code == 404
    assert _request(client, alice, "alice").status_code == 400

    assert _request(client, alice, "bob").status_code == 201
    duplicate = _request(client, alice, "bob")
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Friendship already exists"


def test_reverse_request_is_a_duplicate(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")

    assert _request(client, alice, "bob").status_code == 201
    assert _request(client, bob, "alice").status_code == 400


def test_only_recipient_can_accept(client: TestClient, register) -> None:
    alice = register("alice")
    register("bob")
    _request(client, alice, "bob")

    response = client.post("/api/v1/friends/requests/bob/accept", headers=alice["headers"])
    assert response.status_code == 404


def test_reject_with_reason_then_request_again(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")
    _request(client, alice, "bob")

    rejected = client.post(
        "/api/v1/friends/requests/alice/reject",
        json={"reason": "I don't know you"},
        headers=bob["headers"],
    )
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejection_reason"] == "I don't know you"
    assert client.get("/api/v1/friends/requests/incoming", headers=bob["headers"]).json() == []

    assert client.post("/api/v1/friends/requests/alice/reject", headers=bob["headers"]).status_code == 404

    reopened = _request(client, bob, "alice")
    assert reopened.status_code == 201
    assert reopened.json()["id"] == rejected.json()["id"]
    assert reopened.json()["status"] == "pending"
    assert reopened.json()["requester"]["username"] == "bob"
    assert reopened.json()["rejection_reason"] is None


def test_reject_without_body(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")
    _request(client, alice, "bob")

    rejected = client.post("/api/v1/friends/requests/alice/reject", headers=bob["headers"])
    assert rejected.status_code == 200
    assert rejected.json()["rejection_reason"] is None


def test_cancel_outgoing_request(client: TestClient, register) -> None:
    alice = register("alice")
    bob = register("bob")
    _request(client, alice, "bob")

    assert client.delete("/api/v1/friends/requests/alice", headers=bob["headers"]).status_code == 404
    assert client.delete("/api/v1/friends/requests/bob", headers=alice["headers"]).status_code == 204
    assert client.get("/api/v1/friends/requests/incoming", headers=bob["headers"]).json() == []
    assert client.delete("/api/v1/friends/requests/bob", headers=alice["headers"]).status_code == 404

    assert _request(client, alice, "bob").status_code == 201


def test_remove_friend_withdraws_shares(client: TestClient, register, befriend) -> None:
    alice = register("alice")
    bob = register("bob")
    befriend(alice, bob)

    entry = {
        "title": "Day",
        "content": {"keywords": "k", "key_events": "e", "summary": "s"},
        "entry_date": "2024-01-01",
        "shared_with": ["bob"],
    }
    assert client.post("/api/v1/entries/", json=entry, headers=alice["headers"]).status_code == 201
    assert len(client.get("/api/v1/entries/shared", headers=bob["headers"]).json()) == 1

    assert client.delete("/api/v1/friends/alice", headers=bob["headers"]).status_code == 204
    assert client.get("/api/v1/friends/", headers=alice["headers"]).json() == []
    assert client.get("/api/v1/entries/shared", headers=bob["headers"]).json() == []
    assert client.delete("/api/v1/friends/alice", headers=bob["headers"]).status_code == 404


def test_remove_requires_accepted_friendship(client: TestClient, register) -> None:
    alice = register("alice")
    register("bob")
    _request(client, alice, "bob")

    assert client.delete("/api/v1/friends/bob", headers=alice["headers"]).status_code == 404


def test_block_and_unblock(client: TestClient, register, befriend) -> None:
    alice = register("alice")
    bob = register("bob")
    befriend(alice, bob)

    blocked = client.post(
        "/api/v1/friends/blocks",
        json={"username": "bob", "reason": "spam"},
        headers=alice["headers"],
    )
    assert blocked.status_code == 200
    assert blocked.json()["status"] == "blocked"
    assert blocked.json()["block_reason"] == "spam"
    assert client.get("/api/v1/friends/", headers=alice["headers"]).json() == []
    assert [u["username"] for u in client.get("/api/v1/friends/blocked", headers=alice["headers"]).json()] == ["bob"]
    assert client.get("/api/v1/friends/blocked", headers=bob["headers"]).json() == []

    again = client.post("/api/v1/friends/blocks", json={"username": "bob"}, headers=alice["headers"])
    assert again.status_code == 400

    assert _request(client, bob, "alice").status_code == 400

    assert client.delete("/api/v1/friends/blocks/alice", headers=bob["headers"]).status_code == 403
    assert client.delete("/api/v1/friends/blocks/bob", headers=alice["headers"]).status_code == 204
    assert client.delete("/api/v1/friends/blocks/bob", headers=alice["headers"]).status_code == 404

    assert _request(client, bob, "alice").status_code == 201


def test_block_without_existing_relationship(client: TestClient, register) -> None:
    alice = register("alice")
    register("bob")

    blocked = client.post("/api/v1/friends/blocks", json={"username": "bob"}, headers=alice["headers"])
    assert blocked.status_code == 200
    assert blocked.json()["requester"]["username"] == "alice"
    assert blocked.json()["status"] == "blocked"

    assert client.post("/api/v1/friends/blocks", json={"username": "alice"}, headers=alice["headers"]).status_code == 400
    assert client.post("/api/v1/friends/blocks", json={"username": "ghost"}, headers=alice["headers"]).status_code == 404


def test_blocking_withdraws_shares(client: TestClient, register, befriend) -> None:
    alice = register("alice")
    bob = register("bob")
    befriend(alice, bob)
    entry = {
        "title": "Day",
        "content": {"keywords": "k", "key_events": "e", "summary": "s"},
        "entry_date": "2024-01-01",
        "shared_with": ["alice"],
    }
    client.post("/api/v1/entries/", json=entry, headers=bob["headers"])

    client.post("/api/v1/friends/blocks", json={"username": "bob"}, headers=alice["headers"])
    assert client.get("/api/v1/entries/shared", headers=alice["headers"]).json() == []
    assert client.get("/api/v1/entries/", headers=bob["headers"]).json()[0]["shared_with"] == []


def test_toggle_notifications(client: TestClient, register, befriend) -> None:
    alice = register("alice")
    bob = register("bob")
    register("carol")
    befriend(alice, bob)

    response = client.patch("/api/v1/friends/bob/notifications", json={"enabled": False}, headers=alice["headers"])
    assert response.status_code == 200
    assert response.json()["notifications_enabled"] is False

    missing = client.patch("/api/v1/friends/carol/notifications", json={"enabled": False}, headers=alice["headers"])
    assert missing.status_code == 404


def test_one_row_per_pair_whichever_side_inserts(db_session, register) -> None:
    alice = register("alice")["user"]
    bob = register("bob")["user"]

    db_session.add(Friendship(requester_id=alice["id"], recipient_id=bob["id"]))
    db_session.commit()

    db_session.add(Friendship(requester_id=bob["id"], recipient_id=alice["id"]))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert db_session.query(Friendship).count() == 1


def test_reopened_request_keeps_pair_key(client: TestClient, register, db_session) -> None:
    alice = register("alice")
    bob = register("bob")
    _request(client, alice, "bob")
    client.post("/api/v1/friends/requests/alice/reject", headers=bob["headers"])
    assert _request(client, bob, "alice").status_code == 201

    friendship = db_session.query(Friendship).one()
    assert friendship.requester_id == bob["user"]["id"]
    assert (friendship.user_low_id, friendship.user_high_id) == tuple(
        sorted((alice["user"]["id"], bob["user"]["id"]))
    )
