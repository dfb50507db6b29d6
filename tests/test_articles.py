"""
Article endpoint tests — covers the create / edit / delete / view flow,
tag reconciliation, ownership checks, optimistic concurrency and the
diagnostic response headers.

Each test creates the users, tags and articles it needs, so test order
does not matter.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy.exc import SQLAlchemyError

from webblog.repositories import ArticleRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _create_article(
    client: AsyncClient,
    headers: dict,
    title: str = "Hello",
    content: str = "World",
    tags: list[str] | None = None,
) -> dict:
    resp = await client.post("/Articles/Create", headers=headers, json={
        "title": title,
        "content": content,
        "tags": [{"name": n, "is_checked": True} for n in tags or []],
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _create_tag(client: AsyncClient, headers: dict, name: str) -> dict:
    resp = await client.post("/Tags/Create", headers=headers, json={"name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Infrastructure / health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_response_timing_headers(async_client: AsyncClient):
    """Every response carries X-Response-Time-Ms and X-Query-Count."""
    resp = await async_client.get("/Articles")
    assert "x-response-time-ms" in resp.headers
    assert int(resp.headers["x-query-count"]) >= 1


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_creates_missing_tag(async_client: AsyncClient, author_headers):
    """A checked tag name with no matching Tag creates the tag."""
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "title": "Hello",
        "content": "World",
        "tags": [{"name": "go", "is_checked": True}],
    })
    assert resp.status_code == 201
    article = resp.json()
    assert article["title"] == "Hello"
    assert [t["name"] for t in article["tags"]] == ["go"]
    assert resp.headers["location"] == f"/Articles/Details/{article['id']}"

    tags = (await async_client.get("/Tags/GetTags")).json()
    assert [t["name"] for t in tags] == ["go"]


@pytest.mark.asyncio
async def test_create_article_attaches_existing_tags(async_client: AsyncClient, author_headers):
    """N selected existing tags -> exactly those N tags, no new Tag rows."""
    for name in ("python", "fastapi", "sql"):
        await _create_tag(async_client, author_headers, name)

    article = await _create_article(
        async_client, author_headers, tags=["python", "fastapi", "sql"]
    )
    assert {t["name"] for t in article["tags"]} == {"python", "fastapi", "sql"}

    tags = (await async_client.get("/Tags/GetTags")).json()
    assert len(tags) == 3


@pytest.mark.asyncio
async def test_create_article_skips_unchecked_tags(async_client: AsyncClient, author_headers):
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "title": "Picky",
        "content": "Only one tag",
        "tags": [
            {"name": "kept", "is_checked": True},
            {"name": "dropped", "is_checked": False},
        ],
    })
    assert resp.status_code == 201
    assert [t["name"] for t in resp.json()["tags"]] == ["kept"]
    names = [t["name"] for t in (await async_client.get("/Tags/GetTags")).json()]
    assert "dropped" not in names


@pytest.mark.asyncio
async def test_create_article_sets_author_and_metadata(async_client: AsyncClient, author, author_headers):
    article = await _create_article(async_client, author_headers)
    assert article["author_id"] == author.id
    assert article["author"]["username"] == "author"
    assert article["view_count"] == 0
    assert article["version"] == 1
    assert article["created_at"] is not None
    assert article["comments"] == []


@pytest.mark.asyncio
async def test_create_article_requires_authentication(async_client: AsyncClient):
    resp = await async_client.post("/Articles/Create", json={"title": "T", "content": "C"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_article_null_body(async_client: AsyncClient, author_headers):
    resp = await async_client.post(
        "/Articles/Create",
        content=b"null",
        headers={**author_headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_article_validation_lists_fields(async_client: AsyncClient, author_headers):
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "content": "x" * 1001,
    })
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["detail"]}
    assert {"title", "content"} <= fields


@pytest.mark.asyncio
async def test_create_article_unknown_author(async_client: AsyncClient, admin_headers):
    resp = await async_client.post("/Articles/Create", headers=admin_headers, json={
        "author_id": 9999,
        "title": "Ghost",
        "content": "Nobody wrote this",
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_create_article_for_other_author_forbidden(async_client: AsyncClient, author_headers, make_account):
    other = await make_account("other")
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "author_id": other.id,
        "title": "Impersonation",
        "content": "Not mine",
    })
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_form_lists_tags(async_client: AsyncClient, author_headers):
    await _create_tag(async_client, author_headers, "alpha")
    resp = await async_client.get("/Articles/Create", headers=author_headers)
    assert resp.status_code == 200
    assert resp.json() == [{"id": 1, "name": "alpha", "is_selected": False}]


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_articles_empty(async_client: AsyncClient):
    resp = await async_client.get("/Articles")
    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_list_articles_sorted_by_title(async_client: AsyncClient, author_headers):
    for title in ("Charlie", "Alpha", "Bravo"):
        await _create_article(async_client, author_headers, title=title)

    resp = await async_client.get("/Articles", params={"sort_order": "Title"})
    assert [a["title"] for a in resp.json()] == ["Alpha", "Bravo", "Charlie"]


@pytest.mark.asyncio
async def test_list_articles_default_newest_first(async_client: AsyncClient, author_headers):
    for title in ("First", "Second", "Third"):
        await _create_article(async_client, author_headers, title=title)

    resp = await async_client.get("/Articles", params={"sort_order": "Bogus"})
    assert [a["title"] for a in resp.json()] == ["Third", "Second", "First"]


@pytest.mark.asyncio
async def test_details_increments_view_count(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)

    first = await async_client.get(f"/Articles/Details/{article['id']}")
    second = await async_client.get(f"/Articles/Details/{article['id']}")
    assert first.status_code == 200
    assert first.json()["view_count"] == 1
    assert second.json()["view_count"] == 2


@pytest.mark.asyncio
async def test_details_not_found(async_client: AsyncClient):
    resp = await async_client.get("/Articles/Details/99999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_articles_by_author(async_client: AsyncClient, author, author_headers):
    await _create_article(async_client, author_headers, title="Mine")

    resp = await async_client.get(f"/Articles/GetArticleByAuthor/{author.id}")
    assert resp.status_code == 200
    assert [a["title"] for a in resp.json()] == ["Mine"]


@pytest.mark.asyncio
async def test_articles_by_author_none_found(async_client: AsyncClient, author):
    resp = await async_client.get(f"/Articles/GetArticleByAuthor/{author.id}")
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_edit_article_replaces_fields(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)

    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "article_id": article["id"],
        "title": "Changed",
        "content": "New content",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Changed"
    assert data["content"] == "New content"
    assert data["version"] == article["version"] + 1


@pytest.mark.asyncio
async def test_edit_article_reconciles_tags(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers, tags=["keep", "drop"])

    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "article_id": article["id"],
        "title": "Retagged",
        "content": "World",
        "tags": [
            {"name": "drop", "is_selected": False},
            {"name": "rust", "is_selected": True},
        ],
    })
    assert resp.status_code == 200
    assert {t["name"] for t in resp.json()["tags"]} == {"keep", "rust"}

    # Detaching never deletes the Tag itself.
    names = {t["name"] for t in (await async_client.get("/Tags/GetTags")).json()}
    assert names == {"keep", "drop", "rust"}


@pytest.mark.asyncio
async def test_edit_article_without_content_keeps_it(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers, content="Original")

    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "article_id": article["id"],
        "title": "Changed",
    })
    assert resp.status_code == 200
    assert resp.json()["content"] == "Original"


@pytest.mark.asyncio
async def test_edit_nonexistent_article(async_client: AsyncClient, author_headers):
    """Editing a missing id is a 404 and never creates a row."""
    resp = await async_client.put("/Articles/Edit/4242", headers=author_headers, json={
        "article_id": 4242,
        "title": "Changed",
    })
    assert resp.status_code == 404
    assert (await async_client.get("/Articles")).json() == []


@pytest.mark.asyncio
async def test_edit_article_id_mismatch(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)
    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "article_id": article["id"] + 1,
        "title": "Changed",
    })
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_edit_article_validation_error(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)
    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "article_id": article["id"],
        "title": "x" * 101,
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_edit_article_stale_version_conflict(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)
    url = f"/Articles/Edit/{article['id']}"

    first = await async_client.put(url, headers=author_headers, json={
        "article_id": article["id"], "title": "First writer", "version": article["version"],
    })
    assert first.status_code == 200

    second = await async_client.put(url, headers=author_headers, json={
        "article_id": article["id"], "title": "Second writer", "version": article["version"],
    })
    assert second.status_code == 409

    current = (await async_client.get(f"/Articles/Details/{article['id']}")).json()
    assert current["title"] == "First writer"


@pytest.mark.asyncio
async def test_edit_article_by_other_user_forbidden(
    async_client: AsyncClient, author_headers, make_account, headers_for
):
    article = await _create_article(async_client, author_headers)
    stranger = await make_account("stranger")

    resp = await async_client.put(
        f"/Articles/Edit/{article['id']}",
        headers=headers_for(stranger),
        json={"article_id": article["id"], "title": "Hijacked"},
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_edit_article_by_moderator(
    async_client: AsyncClient, author_headers, make_account, headers_for
):
    article = await _create_article(async_client, author_headers)
    moderator = await make_account("moderator", roles=["Moderator"])

    resp = await async_client.put(
        f"/Articles/Edit/{article['id']}",
        headers=headers_for(moderator),
        json={"article_id": article["id"], "title": "Moderated"},
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_edit_form_flags_selected_tags(async_client: AsyncClient, author_headers):
    await _create_tag(async_client, author_headers, "unused")
    article = await _create_article(async_client, author_headers, tags=["used"])

    resp = await async_client.get(f"/Articles/Edit/{article['id']}", headers=author_headers)
    assert resp.status_code == 200
    flags = {t["name"]: t["is_selected"] for t in resp.json()["tags"]}
    assert flags == {"unused": False, "used": True}


@pytest.mark.asyncio
async def test_edit_form_not_found(async_client: AsyncClient, author_headers):
    resp = await async_client.get("/Articles/Edit/777", headers=author_headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_article_cascades_but_keeps_tags(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers, tags=["survivor"])
    comment = await async_client.post("/Comments/Create", headers=author_headers, json={
        "article_id": article["id"], "content": "First!",
    })
    assert comment.status_code == 201

    resp = await async_client.request(
        "DELETE", "/Articles/Delete", headers=author_headers, json={"id": article["id"]}
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == "/Articles"

    assert (await async_client.get(f"/Articles/Details/{article['id']}")).status_code == 404
    assert (await async_client.get("/Comments/GetComments")).json() == []
    tags = (await async_client.get("/Tags/GetTags", params={"include_articles": True})).json()
    assert [(t["name"], t["articles"]) for t in tags] == [("survivor", [])]


@pytest.mark.asyncio
async def test_delete_nonexistent_article(async_client: AsyncClient, author_headers):
    resp = await async_client.request(
        "DELETE", "/Articles/Delete", headers=author_headers, json={"id": 31337}
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_article_by_other_user_forbidden(
    async_client: AsyncClient, author_headers, make_account, headers_for
):
    article = await _create_article(async_client, author_headers)
    stranger = await make_account("stranger")

    resp = await async_client.request(
        "DELETE", "/Articles/Delete", headers=headers_for(stranger), json={"id": article["id"]}
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_delete_failure_redirects_to_error_view(
    async_client: AsyncClient, author_headers, monkeypatch
):
    article = await _create_article(async_client, author_headers)

    async def _failing_delete(self, article_id):
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(ArticleRepository, "delete", _failing_delete)

    resp = await async_client.request(
        "DELETE", "/Articles/Delete", headers=author_headers, json={"id": article["id"]}
    )
    assert resp.status_code == 303
    assert resp.headers["location"] == f"/Articles/Delete/{article['id']}?save_changes_error=true"


@pytest.mark.asyncio
async def test_delete_view_shows_error_message(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers)

    plain = await async_client.get(f"/Articles/Delete/{article['id']}", headers=author_headers)
    assert plain.status_code == 200
    assert plain.json()["error_message"] is None

    flagged = await async_client.get(
        f"/Articles/Delete/{article['id']}",
        headers=author_headers,
        params={"save_changes_error": True},
    )
    assert flagged.json()["error_message"].startswith("Delete failed")


@pytest.mark.asyncio
async def test_delete_view_not_found(async_client: AsyncClient, author_headers):
    resp = await async_client.get("/Articles/Delete/5", headers=author_headers)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# camelCase request bodies
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_article_camel_case_checked_tag(async_client: AsyncClient, author_headers):
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "title": "Hello",
        "content": "World",
        "tags": [{"name": "go", "isChecked": True}],
    })
    assert resp.status_code == 201
    assert [t["name"] for t in resp.json()["tags"]] == ["go"]


@pytest.mark.asyncio
async def test_create_article_camel_case_unchecked_tag(async_client: AsyncClient, author_headers):
    """isChecked=false attaches nothing and creates no Tag."""
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "title": "Hello",
        "content": "World",
        "tags": [{"name": "go", "isChecked": False}],
    })
    assert resp.status_code == 201
    assert resp.json()["tags"] == []
    assert (await async_client.get("/Tags/GetTags")).json() == []


@pytest.mark.asyncio
async def test_create_article_camel_case_author_id(
    async_client: AsyncClient, author_headers, make_account
):
    other = await make_account("other")
    resp = await async_client.post("/Articles/Create", headers=author_headers, json={
        "authorId": other.id,
        "title": "Impersonation",
        "content": "Not mine",
    })
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_edit_missing_article_camel_case(async_client: AsyncClient, author_headers):
    resp = await async_client.put("/Articles/Edit/999", headers=author_headers, json={
        "articleId": 999,
        "title": "Changed",
    })
    assert resp.status_code == 404
    assert (await async_client.get("/Articles")).json() == []


@pytest.mark.asyncio
async def test_edit_article_camel_case_deselects_tag(async_client: AsyncClient, author_headers):
    article = await _create_article(async_client, author_headers, tags=["keep", "drop"])

    resp = await async_client.put(f"/Articles/Edit/{article['id']}", headers=author_headers, json={
        "articleId": article["id"],
        "title": "Retagged",
        "tags": [{"name": "drop", "isSelected": False}],
        "version": article["version"],
    })
    assert resp.status_code == 200
    assert [t["name"] for t in resp.json()["tags"]] == ["keep"]


# ---------------------------------------------------------------------------
# Comments in list views
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_views_include_comments(async_client: AsyncClient, author, author_headers):
    article = await _create_article(async_client, author_headers)
    resp = await async_client.post("/Comments/Create", headers=author_headers, json={
        "articleId": article["id"], "content": "First!",
    })
    assert resp.status_code == 201

    listed = (await async_client.get("/Articles")).json()
    assert [c["content"] for c in listed[0]["comments"]] == ["First!"]

    by_author = (await async_client.get(f"/Articles/GetArticleByAuthor/{author.id}")).json()
    assert [c["content"] for c in by_author[0]["comments"]] == ["First!"]
