"""
Blog Backend — Author API Tests
=================================

What we test:
    ✅ Create returns the record without any password field
    ✅ Email uniqueness is case-insensitive (400)
    ✅ Update / delete require credentials and only touch your own record (403)
    ✅ A replaced avatar file is removed from storage
    ✅ Avatar upload and the posts-by-author listing
"""

import uuid

import pytest
import pytest_asyncio

AUTHORS = "/api/authors"


def author_body(**overrides):
    body = {
        "firstName": "Grace",
        "lastName": "Hopper",
        "email": "grace@mail.com",
        "password": "cobol-forever",
        "birthDate": "1906-12-09",
    }
    body.update(overrides)
    return body


@pytest_asyncio.fixture
async def grace(register_author):
    """Grace Hopper's record id plus her own credentials."""
    body = await register_author(
        first_name="Grace", last_name="Hopper", email="grace@mail.com", password="cobol-forever"
    )
    return {
        "id": body["author"]["id"],
        "headers": {"Authorization": f"Bearer {body['accessToken']}"},
    }


class TestAuthorCrud:

    @pytest.mark.asyncio
    async def test_create_hides_password(self, test_client):
        response = await test_client.post(AUTHORS, json=author_body())

        assert response.status_code == 201
        data = response.json()
        assert data["firstName"] == "Grace"
        assert data["birthDate"] == "1906-12-09"
        assert "password" not in data
        assert "passwordHash" not in data

    @pytest.mark.asyncio
    async def test_email_is_normalised(self, test_client):
        response = await test_client.post(AUTHORS, json=author_body(email="Grace@Mail.com"))
        assert response.json()["email"] == "grace@mail.com"

    @pytest.mark.asyncio
    async def test_duplicate_email_is_400(self, test_client):
        await test_client.post(AUTHORS, json=author_body())

        response = await test_client.post(AUTHORS, json=author_body(email="GRACE@mail.com"))

        assert response.status_code == 400
        assert response.json()["message"] == "Email is already registered"

    @pytest.mark.asyncio
    async def test_short_password_is_400(self, test_client):
        response = await test_client.post(AUTHORS, json=author_body(password="short"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_and_get(self, test_client):
        created = (await test_client.post(AUTHORS, json=author_body())).json()

        listing = await test_client.get(AUTHORS)
        single = await test_client.get(f"{AUTHORS}/{created['id']}")

        assert [a["id"] for a in listing.json()] == [created["id"]]
        assert single.status_code == 200
        assert single.json()["lastName"] == "Hopper"

    @pytest.mark.asyncio
    async def test_unknown_author_is_404(self, test_client):
        assert (await test_client.get(f"{AUTHORS}/{uuid.uuid4()}")).status_code == 404
        assert (await test_client.get(f"{AUTHORS}/42")).status_code == 404

    @pytest.mark.asyncio
    async def test_update_requires_credentials(self, test_client):
        created = (await test_client.post(AUTHORS, json=author_body())).json()

        response = await test_client.put(f"{AUTHORS}/{created['id']}", json={"firstName": "G"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_update_own_record(self, test_client, grace):
        response = await test_client.put(
            f"{AUTHORS}/{grace['id']}",
            json={"firstName": "Admiral"},
            headers=grace["headers"],
        )

        assert response.status_code == 200
        assert response.json()["firstName"] == "Admiral"
        assert response.json()["lastName"] == "Hopper"

    @pytest.mark.asyncio
    async def test_update_to_taken_email_is_400(self, test_client, grace, auth_headers):
        response = await test_client.put(
            f"{AUTHORS}/{grace['id']}",
            json={"email": "j@x.com"},
            headers=grace["headers"],
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_unknown_author_is_404(self, test_client, grace):
        response = await test_client.put(
            f"{AUTHORS}/{uuid.uuid4()}",
            json={"firstName": "Nobody"},
            headers=grace["headers"],
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_own_record(self, test_client, grace):
        response = await test_client.delete(f"{AUTHORS}/{grace['id']}", headers=grace["headers"])

        assert response.status_code == 200
        assert response.json() == {"message": "Author deleted"}
        assert (await test_client.get(f"{AUTHORS}/{grace['id']}")).status_code == 404


class TestAuthorOwnership:
    """Another author's credentials never modify a record."""

    @pytest.mark.asyncio
    async def test_cannot_change_another_authors_password(self, test_client, grace, auth_headers):
        response = await test_client.put(
            f"{AUTHORS}/{grace['id']}",
            json={"password": "taken-over-now"},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

        hijack = await test_client.post(
            "/api/auth/login", json={"email": "grace@mail.com", "password": "taken-over-now"}
        )
        assert hijack.status_code == 401
        own = await test_client.post(
            "/api/auth/login", json={"email": "grace@mail.com", "password": "cobol-forever"}
        )
        assert own.status_code == 200

    @pytest.mark.asyncio
    async def test_cannot_delete_another_author(self, test_client, grace, auth_headers):
        response = await test_client.delete(f"{AUTHORS}/{grace['id']}", headers=auth_headers)

        assert response.status_code == 403
        assert (await test_client.get(f"{AUTHORS}/{grace['id']}")).status_code == 200

    @pytest.mark.asyncio
    async def test_cannot_replace_another_authors_avatar(
        self, test_client, grace, auth_headers, sample_image_bytes
    ):
        response = await test_client.patch(
            f"{AUTHORS}/{grace['id']}/avatar",
            files={"avatar": ("me.png", sample_image_bytes, "image/png")},
            headers=auth_headers,
        )

        assert response.status_code == 403
        assert (await test_client.get(f"{AUTHORS}/{grace['id']}")).json()["avatar"] is None


class TestAuthorExtras:

    @pytest.mark.asyncio
    async def test_avatar_upload(self, test_client, grace, sample_image_bytes):
        response = await test_client.patch(
            f"{AUTHORS}/{grace['id']}/avatar",
            files={"avatar": ("me.png", sample_image_bytes, "image/png")},
            headers=grace["headers"],
        )

        assert response.status_code == 200
        avatar = response.json()["avatar"]
        assert avatar.startswith("/api/files/avatars/")
        assert (await test_client.get(avatar)).status_code == 200

    @pytest.mark.asyncio
    async def test_replaced_avatar_file_is_removed(self, test_client, grace, sample_image_bytes):
        url = f"{AUTHORS}/{grace['id']}/avatar"
        upload = {"avatar": ("me.png", sample_image_bytes, "image/png")}
        first = (await test_client.patch(url, files=upload, headers=grace["headers"])).json()["avatar"]

        second = (await test_client.patch(url, files=upload, headers=grace["headers"])).json()["avatar"]

        assert second != first
        assert (await test_client.get(first)).status_code == 404
        assert (await test_client.get(second)).status_code == 200

    @pytest.mark.asyncio
    async def test_avatar_without_file_is_400(self, test_client, grace):
        response = await test_client.patch(f"{AUTHORS}/{grace['id']}/avatar", headers=grace["headers"])

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_posts_by_author(self, test_client, auth_headers, register_author):
        other = await register_author(first_name="Kim", last_name="Lee", email="kim@mail.com")
        other_headers = {"Authorization": f"Bearer {other['accessToken']}"}
        for title, headers in (("Mine", auth_headers), ("Theirs", other_headers), ("Mine too", auth_headers)):
            response = await test_client.post(
                "/api/blogPosts",
                json={"title": title, "category": "General", "content": "text"},
                headers=headers,
            )
            assert response.status_code == 201

        me = (await test_client.get("/api/auth/me", headers=auth_headers)).json()
        response = await test_client.get(f"{AUTHORS}/{me['id']}/blogPosts")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Mine", "Mine too"]

    @pytest.mark.asyncio
    async def test_deleting_author_keeps_post_snapshot(self, test_client, auth_headers):
        post = (await test_client.post(
            "/api/blogPosts",
            json={"title": "Legacy", "category": "General", "content": "text"},
            headers=auth_headers,
        )).json()
        me = (await test_client.get("/api/auth/me", headers=auth_headers)).json()

        await test_client.delete(f"{AUTHORS}/{me['id']}", headers=auth_headers)

        fetched = await test_client.get(f"/api/blogPosts/{post['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["author"] == "J Doe"
