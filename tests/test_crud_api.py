"""E2E tests for the generated JSON:API routes (database replaced by FakeDatabase)"""
import json

import asyncpg
import pytest
from httpx import AsyncClient

MEDIA_TYPE = "application/vnd.api+json"
SEARCH_BINDINGS = ("cat", "cat%", "%cat%", "cat", "cat%", "%cat%")


class TestRead:
    @pytest.mark.asyncio
    async def test_show(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.one.append(make_user_row(id=50))

        response = await client.get("/api/users/50")

        assert response.status_code == 200
        assert response.headers["content-type"] == MEDIA_TYPE
        body = response.json()
        assert body["data"]["type"] == "users"
        assert body["data"]["id"] == "50"
        assert body["data"]["attributes"]["created_at"] == "2016-03-10T17:40:46+00:00"
        assert "password_hash" not in body["data"]["attributes"]
        assert body["jsonapi"] == {"version": "1.0", "self": "v1"}
        assert fake_db.sql("fetch_one") == [('select * from "users" where "users"."id" = $1 limit 1', (50,))]

    @pytest.mark.asyncio
    async def test_show_missing(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users/99")

        assert response.status_code == 404
        assert response.headers["content-type"] == MEDIA_TYPE
        [error] = response.json()["errors"]
        assert error["code"] == "not_found"
        assert error["detail"] == "users 99 was not found."

    @pytest.mark.asyncio
    async def test_show_non_numeric_key_is_not_found(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users/abc")

        assert response.status_code == 404
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_sparse_fieldset(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.one.append(make_user_row())

        response = await client.get("/api/users/1", params={"fields[users]": "name,email"})

        assert response.json()["data"]["attributes"] == {"name": "test", "email": "test@test.com"}

    @pytest.mark.asyncio
    async def test_include_is_rejected(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users/1", params={"include": "posts"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_include"


class TestList:
    @pytest.mark.asyncio
    async def test_empty_list(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users")

        assert response.status_code == 200
        assert response.headers["content-type"] == MEDIA_TYPE
        body = response.json()
        assert body["data"] == []
        assert body["meta"]["total"] == 0
        assert body["meta"]["has_pages"] is False
        assert body["links"]["self"] == "http://test/api/users?page[number]=1&page[limit]=10"
        assert body["links"]["next"] is None

        assert fake_db.sql("fetch_value") == [
            ('select count(*) as aggregate from (select * from "users") as aggregate_table', ())
        ]
        assert fake_db.sql("fetch_all") == [
            ('select * from "users" order by "users"."id" asc limit 10 offset 0', ())
        ]

    @pytest.mark.asyncio
    async def test_sorted_second_page(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.values.append(12)
        fake_db.all.append([make_user_row(id=6), make_user_row(id=7)])

        response = await client.get(
            "/api/users",
            params={"sort": "-name", "page[limit]": "5", "page[number]": "2"},
        )

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body["data"]] == ["6", "7"]
        assert body["meta"]["total_pages"] == 3
        assert body["links"]["next"] == "http://test/api/users?sort=-name&page[number]=3&page[limit]=5"
        assert fake_db.sql("fetch_all") == [
            ('select * from "users" order by "users"."name" desc limit 5 offset 5', ())
        ]

    @pytest.mark.asyncio
    async def test_page_limit_is_capped(self, client: AsyncClient, fake_db):
        await client.get("/api/users", params={"page[limit]": "500"})

        [(sql, _)] = fake_db.sql("fetch_all")
        assert sql.endswith("limit 100 offset 0")

    @pytest.mark.asyncio
    async def test_invalid_page_limit(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users", params={"page[limit]": "0"})

        assert response.status_code == 400
        assert response.headers["content-type"] == MEDIA_TYPE
        assert response.json()["errors"][0]["code"] == "bad_request"

    @pytest.mark.asyncio
    async def test_unsortable_column(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users", params={"sort": "password_hash"})

        assert response.status_code == 400
        [error] = response.json()["errors"]
        assert error["code"] == "invalid_sort"
        assert error["source"] == {"parameter": "sort"}

    @pytest.mark.asyncio
    async def test_unknown_query_parameter(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users", params={"foo": "1"})

        assert response.status_code == 400
        [error] = response.json()["errors"]
        assert error["code"] == "invalid_get"
        assert error["source"] == {"parameter": "foo"}

    @pytest.mark.asyncio
    async def test_search(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users", params={"search": "Cat"})

        assert response.status_code == 200
        [(count_sql, count_args)] = fake_db.sql("fetch_value")
        [(sql, args)] = fake_db.sql("fetch_all")

        assert args == SEARCH_BINDINGS * 2
        assert count_args == SEARCH_BINDINGS * 2
        assert 'LOWER("users"."name") ILIKE $1' in sql
        assert ') as "users" order by "relevance" desc limit 10 offset 0' in sql
        assert '"users"."id" asc' not in sql
        assert "$12" in count_sql

    @pytest.mark.asyncio
    async def test_search_with_join(self, client: AsyncClient, fake_db):
        response = await client.get("/api/profiles", params={"search": "555"})

        assert response.status_code == 200
        [(sql, args)] = fake_db.sql("fetch_all")
        assert 'left join "users" on "profiles"."user_id" = "users"."id"' in sql
        assert 'group by "profiles"."id", "users"."name"' in sql
        assert len(args) == 12


class TestWrite:
    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.one.append(make_user_row())

        response = await client.post(
            "/api/users",
            json={"name": "test", "email": "Test@Test.com", "password": "password123"},
        )

        assert response.status_code == 201
        assert response.headers["content-type"] == MEDIA_TYPE
        assert response.json()["data"]["attributes"]["name"] == "test"

        [(sql, args)] = fake_db.sql("fetch_one")
        assert sql == 'insert into "users" ("name", "email", "password_hash") values ($1, $2, $3) returning *'
        assert args[:2] == ("test", "test@test.com")
        assert args[2].startswith("$2b$")

    @pytest.mark.asyncio
    async def test_create_from_document(self, client: AsyncClient, fake_db):
        fake_db.one.append({"id": 3, "phone": "555-0100", "user_id": None})

        response = await client.post(
            "/api/profiles",
            json={"data": {"type": "profiles", "attributes": {"phone": "555-0100"}}},
        )

        assert response.status_code == 201
        assert response.json()["data"] == {
            "type": "profiles",
            "id": "3",
            "attributes": {"id": 3, "phone": "555-0100", "user_id": None},
        }

    @pytest.mark.asyncio
    async def test_create_validation(self, client: AsyncClient, fake_db):
        response = await client.post("/api/users", json={"email": "test"})

        assert response.status_code == 403
        assert response.headers["content-type"] == MEDIA_TYPE
        errors = response.json()["errors"]
        assert {e["source"]["pointer"] for e in errors} == {
            "/data/attributes/name",
            "/data/attributes/email",
            "/data/attributes/password",
        }
        assert all(e["code"] == "invalid_attribute" for e in errors)
        assert fake_db.calls == []

    @pytest.mark.asyncio
    async def test_create_unknown_field(self, client: AsyncClient, fake_db):
        response = await client.post("/api/users", json={"test": "test"})

        assert response.status_code == 403
        pointers = [e["source"]["pointer"] for e in response.json()["errors"]]
        assert "/data/attributes/test" in pointers

    @pytest.mark.asyncio
    async def test_invalid_json(self, client: AsyncClient, fake_db):
        response = await client.post("/api/users", content="not json")

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_body"

    @pytest.mark.asyncio
    async def test_body_must_be_object(self, client: AsyncClient, fake_db):
        response = await client.post("/api/users", json=[1, 2])

        assert response.status_code == 400
        assert response.json()["errors"][0]["code"] == "invalid_body"

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.one.append(make_user_row(name="testupdate"))

        response = await client.patch("/api/users/1", json={"name": "testupdate"})

        assert response.status_code == 200
        assert response.json()["data"]["attributes"]["name"] == "testupdate"
        assert fake_db.sql("fetch_one") == [
            (
                'update "users" set "name" = $1, "updated_at" = now() where "id" = $2 returning *',
                ("testupdate", 1),
            )
        ]

    @pytest.mark.asyncio
    async def test_update_missing(self, client: AsyncClient, fake_db):
        response = await client.patch("/api/users/1", json={"name": "x"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_returns_removed_record(self, client: AsyncClient, fake_db, make_user_row):
        fake_db.one.append(make_user_row())

        response = await client.delete("/api/users/1")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == "1"
        assert fake_db.sql("fetch_one") == [('delete from "users" where "id" = $1 returning *', (1,))]

    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient, fake_db):
        response = await client.delete("/api/users/1")
        assert response.status_code == 404


class TestNegotiation:
    @pytest.mark.asyncio
    async def test_strict_rejects_foreign_accept(self, client: AsyncClient, fake_db, monkeypatch):
        monkeypatch.setenv("JSONAPI_STRICT", "1")

        response = await client.get("/api/users", headers={"Accept": "text/html"})

        assert response.status_code == 406
        assert response.json()["errors"][0]["code"] == "not_acceptable"

    @pytest.mark.asyncio
    async def test_strict_rejects_plain_json_body(self, client: AsyncClient, fake_db, monkeypatch):
        monkeypatch.setenv("JSONAPI_STRICT", "1")

        response = await client.post("/api/profiles", json={"phone": "555-0100"})

        assert response.status_code == 415

    @pytest.mark.asyncio
    async def test_strict_accepts_jsonapi_body(self, client: AsyncClient, fake_db, monkeypatch):
        monkeypatch.setenv("JSONAPI_STRICT", "1")
        fake_db.one.append({"id": 1, "phone": "555-0100", "user_id": None})

        response = await client.post(
            "/api/profiles",
            content=json.dumps({"data": {"type": "profiles", "attributes": {"phone": "555-0100"}}}),
            headers={"Content-Type": MEDIA_TYPE, "Accept": MEDIA_TYPE},
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_lenient_mode_ignores_headers(self, client: AsyncClient, fake_db):
        response = await client.get("/api/users", headers={"Accept": "text/html"})
        assert response.status_code == 200


class TestDatabaseErrors:
    @pytest.mark.asyncio
    async def test_database_error_is_rendered(self, client: AsyncClient, fake_db):
        fake_db.one.append(asyncpg.exceptions.UndefinedTableError('relation "users" does not exist'))

        response = await client.get("/api/users/1")

        assert response.status_code == 500
        assert response.headers["content-type"] == MEDIA_TYPE
        assert response.json()["errors"][0]["code"] == "server_error"
