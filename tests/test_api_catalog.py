from fastapi.testclient import TestClient

from conftest import make_image
from gamecatalog_api.utils.images import PLATFORM_FOLDER, VIDEO_GAME_FOLDER


def test_health(client: TestClient):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["ok"] is True


def test_video_game_lifecycle(client: TestClient, admin_headers, store):
    resp = client.post(
        "/video_games/",
        data={"name": "Hades", "description": "Roguelike"},
        files={"picture": ("hades.webp", make_image("WEBP"), "image/webp")},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    video_game_id = resp.json()["id"]
    assert store.exists(VIDEO_GAME_FOLDER, video_game_id)

    assert client.get("/video_games/", params={"name": "HAD"}).json()[0]["name"] == "Hades"
    assert client.get("/video_games/", params={"name": "zzz"}).json() == []

    resp = client.patch(f"/video_games/{video_game_id}", data={"name": "Hades II"}, headers=admin_headers)
    assert resp.json() == {"id": video_game_id, "name": "Hades II", "description": "Roguelike"}

    assert client.delete(f"/video_games/{video_game_id}", headers=admin_headers).status_code == 204
    assert not store.exists(VIDEO_GAME_FOLDER, video_game_id)
    assert client.get(f"/video_games/{video_game_id}").status_code == 404


def test_video_game_picture_only_update(client: TestClient, admin_headers, catalog, store):
    video_game_id = catalog["video_game_id"]
    before = store.path_for(VIDEO_GAME_FOLDER, video_game_id).read_bytes()

    resp = client.patch(
        f"/video_games/{video_game_id}",
        files={"picture": ("new.png", make_image(color=(0, 128, 0)), "image/png")},
        headers=admin_headers,
    )

    assert resp.status_code == 200
    assert store.path_for(VIDEO_GAME_FOLDER, video_game_id).read_bytes() != before


def test_video_game_update_rejects_blank_name(client: TestClient, admin_headers, catalog):
    video_game_id = catalog["video_game_id"]

    resp = client.patch(f"/video_games/{video_game_id}", data={"name": "   "}, headers=admin_headers)
    assert resp.status_code == 422
    assert client.get(f"/video_games/{video_game_id}").json()["name"] == "Astro Bot"

    resp = client.patch(f"/video_games/{video_game_id}", data={"name": "  Astro Bot 2 "}, headers=admin_headers)
    assert resp.json()["name"] == "Astro Bot 2"


def test_publications_require_login(client: TestClient, member_headers, catalog):
    assert client.get("/publications/").status_code in (401, 403)

    publications = client.get("/publications/", headers=member_headers).json()
    assert publications[0]["platform_code"] == "PS5"
    assert publications[0]["release_price"] == 59.99


def test_publication_crud(client: TestClient, admin_headers, catalog):
    payload = {
        "video_game_id": catalog["video_game_id"],
        "platform_code": "PS5",
        "release_date": "2024-09-06",
    }
    resp = client.post("/publications/", json=payload, headers=admin_headers)
    assert resp.status_code == 409

    resp = client.post("/publications/", json={**payload, "platform_code": "NES"}, headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["code"] == "FOREIGN_KEY_NOT_FOUND"

    publication_id = catalog["publication_id"]
    resp = client.patch(
        f"/publications/{publication_id}",
        json={"release_price": None, "store_page_url": "https://store.example.com/astro-bot"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["release_price"] is None
    assert resp.json()["store_page_url"] == "https://store.example.com/astro-bot"

    resp = client.patch(f"/publications/{publication_id}", json={"release_date": None}, headers=admin_headers)
    assert resp.status_code == 422

    assert client.delete(f"/publications/{publication_id}", headers=admin_headers).status_code == 204
    assert client.get("/games/count", headers=admin_headers).json() == {"count": 0}


def test_my_games(client: TestClient, admin_headers, catalog):
    publication_id = catalog["publication_id"]

    resp = client.post("/games/me", json={"publication_id": publication_id}, headers=admin_headers)
    assert resp.status_code == 201
    assert client.post("/games/me", json={"publication_id": publication_id}, headers=admin_headers).status_code == 409
    assert client.post("/games/me", json={"publication_id": 999}, headers=admin_headers).status_code == 404

    mine = client.get("/games/me", headers=admin_headers).json()
    assert [g["publication_id"] for g in mine] == [publication_id]

    assert client.delete(f"/games/me/{publication_id}", headers=admin_headers).status_code == 204
    assert client.get("/games/me", headers=admin_headers).json() == []


def test_categories(client: TestClient, admin_headers, catalog):
    category_id = catalog["category_id"]
    video_game_id = catalog["video_game_id"]

    resp = client.post("/categories/", json={"name": "Co-op"}, headers=admin_headers)
    assert resp.status_code == 201
    coop_id = resp.json()["id"]

    resp = client.post(f"/categories/{coop_id}/video_games", json={"video_game_id": video_game_id}, headers=admin_headers)
    assert resp.status_code == 204
    assert [vg["id"] for vg in client.get(f"/categories/{coop_id}/video_games").json()] == [video_game_id]

    resp = client.patch(f"/categories/{coop_id}", json={"name": "Platformers"}, headers=admin_headers)
    assert resp.status_code == 409

    resp = client.delete(f"/categories/{category_id}/video_games/{video_game_id}", headers=admin_headers)
    assert resp.status_code == 204
    assert client.delete(f"/categories/{coop_id}", headers=admin_headers).status_code == 204
    assert client.get("/categories/count").json() == {"count": 1}


def test_genres(client: TestClient, admin_headers):
    for name in ("Strategy", "Adventure", "Puzzle"):
        assert client.post("/genres/", json={"name": name}, headers=admin_headers).status_code == 201

    assert [g["name"] for g in client.get("/genres/").json()] == ["Strategy", "Adventure", "Puzzle"]
    alphabetical = client.get("/genres/", params={"alphabetical": True, "page": 1, "limit": 2}).json()
    assert [g["name"] for g in alphabetical] == ["Adventure", "Puzzle"]

    genre_id = client.get("/genres/", params={"page": 1, "limit": 1}).json()[0]["id"]
    resp = client.patch(f"/genres/{genre_id}", json={"description": "Think ahead"}, headers=admin_headers)
    assert resp.json()["description"] == "Think ahead"
    assert client.patch(f"/genres/{genre_id}", json={}, headers=admin_headers).status_code == 400
    assert client.delete(f"/genres/{genre_id}", headers=admin_headers).status_code == 204
    assert client.get(f"/genres/{genre_id}").status_code == 404
    assert client.get("/genres/count").json() == {"count": 2}


def test_picture_sweep(client: TestClient, admin_headers, member_headers, catalog, store):
    store.put(PLATFORM_FOLDER, "GHOST", make_image())

    assert client.post("/pictures/sweep", headers=member_headers).status_code == 403
    resp = client.post("/pictures/sweep", headers=admin_headers)

    assert resp.status_code == 200
    assert resp.json()["removed"] == [f"{PLATFORM_FOLDER}/GHOST.png"]
    assert not store.exists(PLATFORM_FOLDER, "GHOST")
