"""
Tests for registration, login, token rotation and password changes
"""

from app.services.auth import REFRESH_TOKEN_TYPE, AuthService
from tests.conftest import PASSWORD, USERS_API

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def registration_form(**overrides) -> dict:
    form = {
        "fullName": "Alice Liddell",
        "email": "alice@example.com",
        "username": "Alice",
        "password": PASSWORD
    }
    form.update(overrides)
    return form


async def test_register_creates_masked_user(client, media):
    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["success"] is True
    assert body["statusCode"] == 201

    user = body["data"]
    assert user["username"] == "alice"
    assert user["email"] == "alice@example.com"
    assert user["avatar"].startswith("https://media.test/")
    assert user["cover_image"] == ""
    assert "hashed_password" not in user
    assert "refresh_token" not in user
    assert len(media.uploaded) == 1


async def test_register_uploads_cover_image(client, media):
    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(),
        files={
            "avatar": ("avatar.png", PNG_BYTES, "image/png"),
            "coverImage": ("cover.jpg", PNG_BYTES, "image/jpeg")
        }
    )

    assert response.status_code == 201, response.text
    assert response.json()["data"]["cover_image"].endswith(".jpg")
    assert len(media.uploaded) == 2


async def test_register_requires_every_field(client):
    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(email="   "),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "All fields are required"


async def test_register_requires_avatar(client):
    response = await client.post(f"{USERS_API}/register", data=registration_form())

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar file is required"


async def test_register_rejects_taken_username_or_email(client, make_user):
    await make_user("alice")

    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(email="someone-else@example.com"),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )
    assert response.status_code == 409

    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(username="someone"),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )
    assert response.status_code == 409


async def test_register_fails_when_avatar_upload_fails(client, media):
    media.fail = True

    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Avatar file could not be uploaded"


async def test_register_rejects_non_image_files(client):
    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(),
        files={"avatar": ("avatar.exe", b"MZ", "application/octet-stream")}
    )

    assert response.status_code == 400
    assert response.json()["message"].startswith("Unsupported file type")


async def test_login_by_username_or_email(client, make_user):
    await make_user("alice")

    response = await client.post(f"{USERS_API}/login", json={"username": "ALICE", "password": PASSWORD})
    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["user"]["username"] == "alice"
    assert data["access_token"]
    assert data["refresh_token"]
    assert response.cookies.get("accessToken") == data["access_token"]
    assert response.cookies.get("refreshToken") == data["refresh_token"]

    response = await client.post(f"{USERS_API}/login", json={"email": "alice@example.com", "password": PASSWORD})
    assert response.status_code == 200


async def test_login_errors(client, make_user):
    await make_user("alice")

    response = await client.post(f"{USERS_API}/login", json={"password": PASSWORD})
    assert response.status_code == 400

    response = await client.post(f"{USERS_API}/login", json={"username": "nobody", "password": PASSWORD})
    assert response.status_code == 404
    assert response.json()["message"] == "User does not exist"

    response = await client.post(f"{USERS_API}/login", json={"username": "alice", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid user credentials"


async def test_access_token_cookie_authenticates(client, make_user):
    await make_user("alice")
    await client.post(f"{USERS_API}/login", json={"username": "alice", "password": PASSWORD})

    response = await client.get(f"{USERS_API}/current-user")

    assert response.status_code == 200
    assert response.json()["data"]["username"] == "alice"


async def test_current_user_requires_token(client):
    response = await client.get(f"{USERS_API}/current-user")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json() == {
        "statusCode": 401,
        "message": "Unauthorized request",
        "errors": [],
        "success": False
    }


async def test_refresh_rotates_tokens_and_rejects_reuse(client, make_user, login):
    await make_user("alice")
    tokens = await login("alice")

    response = await client.post(f"{USERS_API}/refresh-token", json={"refreshToken": tokens["refresh_token"]})
    assert response.status_code == 200, response.text
    rotated = response.json()["data"]
    assert rotated["refresh_token"] != tokens["refresh_token"]
    client.cookies.clear()

    # The previous refresh token is no longer the stored one
    response = await client.post(f"{USERS_API}/refresh-token", json={"refreshToken": tokens["refresh_token"]})
    assert response.status_code == 401
    assert response.json()["message"] == "Refresh token is expired or used"

    response = await client.post(f"{USERS_API}/refresh-token", json={"refreshToken": rotated["refresh_token"]})
    assert response.status_code == 200


async def test_refresh_requires_valid_token(client):
    response = await client.post(f"{USERS_API}/refresh-token")
    assert response.status_code == 401
    assert response.json()["message"] == "Unauthorized request"

    response = await client.post(f"{USERS_API}/refresh-token", json={"refreshToken": "not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid refresh token"


async def test_logout_ends_session(client, make_user, login):
    await make_user("alice")
    tokens = await login("alice")
    headers = {"Authorization": f"Bearer {tokens['access_token']}"}

    response = await client.post(f"{USERS_API}/logout", headers=headers)
    assert response.status_code == 200
    assert response.json()["message"] == "User logged out"

    response = await client.post(f"{USERS_API}/refresh-token", json={"refreshToken": tokens["refresh_token"]})
    assert response.status_code == 401


async def test_change_password(client, make_user, auth_headers):
    await make_user("alice")
    headers = await auth_headers("alice")

    response = await client.post(
        f"{USERS_API}/change-password",
        json={"oldPassword": "wrong", "newPassword": "new-secret"},
        headers=headers
    )
    assert response.status_code == 401

    response = await client.post(
        f"{USERS_API}/change-password",
        json={"oldPassword": PASSWORD, "newPassword": "new-secret"},
        headers=headers
    )
    assert response.status_code == 200

    response = await client.post(f"{USERS_API}/login", json={"username": "alice", "password": PASSWORD})
    assert response.status_code == 401
    response = await client.post(f"{USERS_API}/login", json={"username": "alice", "password": "new-secret"})
    assert response.status_code == 200


async def test_tokens_are_not_interchangeable(make_user):
    user = await make_user("alice")

    access_token = AuthService.create_access_token(user)
    refresh_token = AuthService.create_refresh_token(user)

    assert AuthService.verify_token(access_token).user_id == user.id
    assert AuthService.verify_token(access_token).username == "alice"
    assert AuthService.verify_token(refresh_token, REFRESH_TOKEN_TYPE).user_id == user.id
    assert AuthService.verify_token(refresh_token) is None
    assert AuthService.verify_token(access_token, REFRESH_TOKEN_TYPE) is None
    assert AuthService.create_refresh_token(user) != refresh_token


async def test_register_trims_username(client):
    response = await client.post(
        f"{USERS_API}/register",
        data=registration_form(username="  Bob  "),
        files={"avatar": ("avatar.png", PNG_BYTES, "image/png")}
    )
    assert response.status_code == 201, response.text
    assert response.json()["data"]["username"] == "bob"

    response = await client.get(f"{USERS_API}/c/bob")
    assert response.status_code == 200

    response = await client.post(f"{USERS_API}/login", json={"username": " bob ", "password": PASSWORD})
    assert response.status_code == 200


async def test_stale_cookie_does_not_shadow_bearer_header(client, make_user, login):
    await make_user("alice")
    tokens = await login("alice")
    headers = {
        "Cookie": "accessToken=stale-token",
        "Authorization": f"Bearer {tokens['access_token']}"
    }

    response = await client.get(f"{USERS_API}/current-user", headers=headers)

    assert response.status_code == 200, response.text
    assert response.json()["data"]["username"] == "alice"

    response = await client.get(f"{USERS_API}/current-user", headers={"Cookie": "accessToken=stale-token"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid access token"
