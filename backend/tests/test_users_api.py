# =============================================================================
# tests/test_users_api.py - User Endpoint Tests
# =============================================================================

import uuid

from sqlalchemy.exc import OperationalError

from webapp.models import User
from webapp.utils import db as db_utils

SECRET_FIELDS = {"password", "password_hash", "verification_token", "verification_token_expiry"}


class TestRegistration:

    def test_created_user_is_unverified_and_has_no_secrets(self, client, user_payload):
        response = client.post("/v1/user", json=user_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "alice@example.com"
        assert body["first_name"] == "Alice"
        assert body["email_verified"] is False
        assert SECRET_FIELDS.isdisjoint(body)
        uuid.UUID(body["id"])

    def test_verification_message_published(self, client, publisher, user_payload):
        client.post("/v1/user", json=user_payload)

        assert len(publisher.messages) == 1
        message = publisher.messages[0]
        assert message["topic"] == "user-registration"
        assert message["payload"]["email"] == "alice@example.com"
        assert message["payload"]["firstName"] == "Alice"
        assert message["payload"]["lastName"] == "Smith"
        assert message["payload"]["token"]

    def test_publish_failure_does_not_fail_registration(self, client, publisher, user_payload):
        publisher.fail = True

        response = client.post("/v1/user", json=user_payload)

        assert response.status_code == 201
        assert client.get("/v1/user/self", auth=("alice@example.com", user_payload["password"])).status_code == 200

    def test_duplicate_email(self, client, user_payload):
        assert client.post("/v1/user", json=user_payload).status_code == 201

        response = client.post("/v1/user", json=user_payload)

        assert response.status_code == 400

    def test_invalid_email(self, client, user_payload):
        user_payload["username"] = "not-an-email"
        assert client.post("/v1/user", json=user_payload).status_code == 400

    def test_missing_field(self, client, user_payload):
        del user_payload["last_name"]
        assert client.post("/v1/user", json=user_payload).status_code == 400

    def test_blank_field(self, client, user_payload):
        user_payload["first_name"] = "   "
        assert client.post("/v1/user", json=user_payload).status_code == 400

    def test_read_only_fields_rejected(self, client, user_payload):
        user_payload["email_verified"] = True
        assert client.post("/v1/user", json=user_payload).status_code == 400

    def test_password_whitespace_is_part_of_the_secret(self, client, user_payload):
        user_payload["password"] = "  pad secret  "
        assert client.post("/v1/user", json=user_payload).status_code == 201

        assert client.get("/v1/user/self", auth=("alice@example.com", "  pad secret  ")).status_code == 200
        assert client.get("/v1/user/self", auth=("alice@example.com", "pad secret")).status_code == 401

    def test_password_longer_than_72_bytes(self, client, user_payload):
        user_payload["password"] = "x" * 73
        assert client.post("/v1/user", json=user_payload).status_code == 400

    def test_password_limit_counts_bytes(self, client, user_payload):
        user_payload["password"] = "é" * 37
        assert client.post("/v1/user", json=user_payload).status_code == 400

        user_payload["password"] = "é" * 36
        assert client.post("/v1/user", json=user_payload).status_code == 201

    def test_user_and_token_stored_together(self, client, publisher, database, user_payload, monkeypatch):
        def no_follow_up_writes(*args, **kwargs):
            raise OperationalError("UPDATE users", {}, Exception("database is locked"))

        monkeypatch.setattr(db_utils, "update", no_follow_up_writes)

        response = client.post("/v1/user", json=user_payload)

        assert response.status_code == 201
        with database.session() as session:
            stored = session.query(User).filter(User.username == "alice@example.com").one()
            assert stored.verification_token == publisher.last_token("alice@example.com")
            assert stored.verification_token_expiry is not None


class TestVerifyEndpoint:

    def test_scenario_wrong_token_then_expired_then_duplicate(self, client, publisher, clock, user_payload):
        assert client.post("/v1/user", json=user_payload).status_code == 201
        token = publisher.last_token("alice@example.com")

        wrong = client.get("/v1/user/verify", params={"email": "alice@example.com", "token": "wrong"})
        assert wrong.status_code == 400

        clock.advance(61)
        expired = client.get("/v1/user/verify", params={"email": "alice@example.com", "token": token})
        assert expired.status_code == 400
        assert "expired" in expired.json()["detail"].lower()

        duplicate = client.post("/v1/user", json=user_payload)
        assert duplicate.status_code == 400

    def test_verify_then_verify_again(self, client, publisher, clock, user_payload):
        client.post("/v1/user", json=user_payload)
        token = publisher.last_token("alice@example.com")
        clock.advance(30)

        first = client.get("/v1/user/verify", params={"email": "alice@example.com", "token": token})
        second = client.get("/v1/user/verify", params={"email": "alice@example.com", "token": token})

        assert first.status_code == 200
        assert second.status_code == 200
        me = client.get("/v1/user/self", auth=("alice@example.com", user_payload["password"])).json()
        assert me["email_verified"] is True

    def test_missing_params(self, client):
        assert client.get("/v1/user/verify").status_code == 400
        assert client.get("/v1/user/verify", params={"email": "alice@example.com"}).status_code == 400
        assert client.get("/v1/user/verify", params={"token": "abc"}).status_code == 400

    def test_unknown_email(self, client):
        response = client.get("/v1/user/verify", params={"email": "ghost@example.com", "token": "abc"})
        assert response.status_code == 404


class TestSelf:

    def test_requires_auth(self, client):
        response = client.get("/v1/user/self")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"

    def test_wrong_password(self, client, alice):
        assert client.get("/v1/user/self", auth=("alice@example.com", "wrong")).status_code == 401

    def test_unknown_user_same_response_as_wrong_password(self, client, alice):
        wrong_password = client.get("/v1/user/self", auth=("alice@example.com", "wrong"))
        unknown_user = client.get("/v1/user/self", auth=("nobody@example.com", "wrong"))

        assert wrong_password.status_code == unknown_user.status_code == 401
        assert wrong_password.json() == unknown_user.json()

    def test_get_self(self, client, alice):
        response = client.get("/v1/user/self", auth=alice["auth"])

        assert response.status_code == 200
        assert response.json()["id"] == alice["id"]
        assert SECRET_FIELDS.isdisjoint(response.json())

    def test_put_self_replaces_profile(self, client, alice):
        response = client.put(
            "/v1/user/self",
            json={"first_name": "Alicia", "last_name": "Smythe", "password": "N3w-password"},
            auth=alice["auth"],
        )

        assert response.status_code == 204
        assert response.content == b""
        assert client.get("/v1/user/self", auth=alice["auth"]).status_code == 401
        me = client.get("/v1/user/self", auth=("alice@example.com", "N3w-password")).json()
        assert me["first_name"] == "Alicia"
        assert me["last_name"] == "Smythe"

    def test_put_self_requires_all_fields(self, client, alice):
        response = client.put("/v1/user/self", json={"first_name": "Alicia"}, auth=alice["auth"])
        assert response.status_code == 400

    def test_put_self_cannot_change_username(self, client, alice):
        response = client.put(
            "/v1/user/self",
            json={"first_name": "A", "last_name": "S", "password": "pw", "username": "eve@example.com"},
            auth=alice["auth"],
        )
        assert response.status_code == 400

    def test_put_self_keeps_password_whitespace(self, client, alice):
        response = client.put(
            "/v1/user/self",
            json={"first_name": "Alice", "last_name": "Smith", "password": " spaced out "},
            auth=alice["auth"],
        )

        assert response.status_code == 204
        assert client.get("/v1/user/self", auth=("alice@example.com", " spaced out ")).status_code == 200

    def test_put_self_overlong_password(self, client, alice):
        response = client.put(
            "/v1/user/self",
            json={"first_name": "Alice", "last_name": "Smith", "password": "p" * 100},
            auth=alice["auth"],
        )

        assert response.status_code == 400
        assert client.get("/v1/user/self", auth=alice["auth"]).status_code == 200

    def test_overlong_password_login_same_as_wrong_password(self, client, alice):
        known = client.get("/v1/user/self", auth=("alice@example.com", "q" * 100))
        unknown = client.get("/v1/user/self", auth=("nobody@example.com", "q" * 100))

        assert known.status_code == unknown.status_code == 401
        assert known.json() == unknown.json()


class TestUserById:

    def test_get_own_record(self, client, alice):
        response = client.get(f"/v1/user/{alice['id']}", auth=alice["auth"])
        assert response.status_code == 200
        assert response.json()["username"] == "alice@example.com"

    def test_other_user_forbidden(self, client, alice, bob):
        assert client.get(f"/v1/user/{bob['id']}", auth=alice["auth"]).status_code == 403
        response = client.put(
            f"/v1/user/{bob['id']}",
            json={"first_name": "X", "last_name": "Y", "password": "Z"},
            auth=alice["auth"],
        )
        assert response.status_code == 403

    def test_unknown_user(self, client, alice):
        assert client.get(f"/v1/user/{uuid.uuid4()}", auth=alice["auth"]).status_code == 404

    def test_malformed_id(self, client, alice):
        assert client.get("/v1/user/12345", auth=alice["auth"]).status_code == 400

    def test_put_own_record(self, client, alice):
        response = client.put(
            f"/v1/user/{alice['id']}",
            json={"first_name": "Al", "last_name": "Smith", "password": "S3cret!pass"},
            auth=alice["auth"],
        )
        assert response.status_code == 204
        assert client.get("/v1/user/self", auth=alice["auth"]).json()["first_name"] == "Al"
