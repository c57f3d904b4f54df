from datetime import datetime, timedelta
from biolink.models.click import Click
from biolink.models.user import User


def _published_page(client, headers, slug="alice", **design):
    page_id = client.post("/pages", headers=headers, json={"title": "Alice", "slug": slug}).json()["id"]
    if design:
        assert client.put(f"/pages/{page_id}", headers=headers, json=design).status_code == 200
    client.post(f"/pages/{page_id}/publish", headers=headers)
    return page_id


def _block(client, headers, page_id, **body):
    body.setdefault("type", "link")
    response = client.post(f"/blocks/pages/{page_id}/blocks", headers=headers, json=body)
    assert response.status_code == 201
    return response.json()["id"]


# ========== TEST PAGE PUBLIQUE ==========
def test_public_page(client, free_headers):
    page_id = _published_page(client, free_headers, animation="fade")
    _block(client, free_headers, page_id, title="Site", url="https://alice.example.com")
    _block(client, free_headers, page_id, title="Caché", is_visible=False)
    _block(client, free_headers, page_id, title="Inactif", is_active=False)

    response = client.get("/u/alice")
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Alice"
    assert data["show_branding"] is True
    assert data["style"]["animation"] == "fade"
    assert [b["title"] for b in data["blocks"]] == ["Site"]
    assert data["blocks"][0]["animation_delay_ms"] == 0


def test_public_page_not_found(client, free_headers):
    assert client.get("/u/nobody").status_code == 404

    # page non publiée
    client.post("/pages", headers=free_headers, json={"title": "Draft", "slug": "draft"})
    assert client.get("/u/draft").status_code == 404


def test_public_page_time_window(client, free_headers):
    page_id = _published_page(client, free_headers)
    now = datetime.utcnow()
    _block(client, free_headers, page_id, title="Futur", visible_from=(now + timedelta(days=1)).isoformat())
    _block(client, free_headers, page_id, title="Passé", visible_to=(now - timedelta(days=1)).isoformat())
    _block(client, free_headers, page_id, title="En cours",
           visible_from=(now - timedelta(days=1)).isoformat(), visible_to=(now + timedelta(days=1)).isoformat())

    titles = [b["title"] for b in client.get("/u/alice").json()["blocks"]]
    assert titles == ["En cours"]


def test_public_page_uses_owner_plan(client, pro_headers, db):
    """Le style Pro disparaît quand le propriétaire repasse en Free"""
    page_id = _published_page(client, pro_headers, slug="pro-page",
                              bg_type="gradient", gradient_from="#000000", gradient_to="#ffffff",
                              custom_css=".x { color: red; }")
    _block(client, pro_headers, page_id, type="video", title="Clip")
    _block(client, pro_headers, page_id, type="link", title="Lien")

    data = client.get("/u/pro-page").json()
    assert data["style"]["background"] == "linear-gradient(135deg, #000000, #ffffff)"
    assert data["style"]["custom_css"] == ".x { color: red; }"
    assert data["show_branding"] is False
    assert [b["title"] for b in data["blocks"]] == ["Clip", "Lien"]

    owner = db.query(User).filter(User.plan == "pro").first()
    owner.plan = "free"
    db.commit()

    data = client.get("/u/pro-page").json()
    assert data["style"]["background"] != "linear-gradient(135deg, #000000, #ffffff)"
    assert data["style"]["custom_css"] is None
    assert data["show_branding"] is True
    assert [b["title"] for b in data["blocks"]] == ["Lien"]


# ========== TEST CLICS ==========
def test_track_click(client, free_headers, db):
    page_id = _published_page(client, free_headers)
    block_id = _block(client, free_headers, page_id, title="Site")

    response = client.post(
        "/u/alice/click",
        json={"block_id": block_id, "country": "FR"},
        headers={
            "User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148",
            "Referer": "https://instagram.com/"
        }
    )
    assert response.status_code == 201
    assert response.json() == {"recorded": True}

    click = db.query(Click).first()
    assert click.page_id == page_id
    assert click.block_id == block_id
    assert click.device == "mobile"
    assert click.country == "FR"
    assert click.referrer == "https://instagram.com/"


def test_track_click_unknown_block(client, free_headers, pro_headers):
    _published_page(client, free_headers)
    other_page = _published_page(client, pro_headers, slug="other")
    other_block = _block(client, pro_headers, other_page)

    response = client.post("/u/alice/click", json={"block_id": other_block})
    assert response.status_code == 404


def test_track_click_unpublished(client, free_headers):
    client.post("/pages", headers=free_headers, json={"title": "Draft", "slug": "draft"})
    assert client.post("/u/draft/click", json={}).status_code == 404


def test_track_click_invalid_device_ignored(client, free_headers, db):
    _published_page(client, free_headers)
    client.post("/u/alice/click", json={"device": "toaster"})
    assert db.query(Click).first().device is None
