import pytest

from gamecatalog_api.models.genre import Genre
from gamecatalog_api.utils.genre import count_genres, create_genre, get_genres
from gamecatalog_api.utils.lookup import contains, exact, find_rows, paginate, row_exists
from gamecatalog_api.utils.video_game import count_video_games, create_video_game, get_video_games


@pytest.fixture
def genres(db):
    return [create_genre(db, f"Genre {i:02d}") for i in range(1, 26)]


def test_pages_are_one_based(db, genres):
    page_two = get_genres(db, page=2, limit=10)
    page_three = get_genres(db, page=3, limit=10)
    page_four = get_genres(db, page=4, limit=10)

    assert [g.id for g in page_two] == genres[10:20]
    assert [g.id for g in page_three] == genres[20:25]
    assert page_four == []


def test_pagination_needs_both_page_and_limit(db, genres):
    assert len(get_genres(db, page=2)) == 25
    assert len(get_genres(db, limit=5)) == 25


def test_invalid_page_is_rejected(db):
    with pytest.raises(ValueError):
        paginate(db.query(Genre), 0, 10)


def test_default_order_is_primary_key(db):
    for name in ("Zelda-like", "Action", "Metroidvania"):
        create_genre(db, name)

    assert [g.name for g in get_genres(db)] == ["Zelda-like", "Action", "Metroidvania"]
    assert [g.name for g in get_genres(db, alphabetical=True)] == ["Action", "Metroidvania", "Zelda-like"]


def test_count_ignores_pagination(db, genres):
    assert count_genres(db) == 25
    assert len(get_genres(db, page=1, limit=3)) == 3


def test_none_filters_are_ignored(db, genres):
    assert len(find_rows(db, Genre, exact(Genre.id, None), contains(Genre.name, None))) == 25


def test_name_filter_is_case_insensitive_substring(db, store, png):
    create_video_game(db, store, "Super Mario Odyssey", "", png)
    create_video_game(db, store, "Mario Kart 8", "", png)
    create_video_game(db, store, "Celeste", "", png)

    names = [vg.name for vg in get_video_games(db, name="mARIo")]

    assert names == ["Super Mario Odyssey", "Mario Kart 8"]
    assert count_video_games(db, name="mario") == 2


def test_like_wildcards_in_name_are_literal(db, store, png):
    create_video_game(db, store, "100% Orange Juice", "", png)
    create_video_game(db, store, "1000 Xeno", "", png)

    assert [vg.name for vg in get_video_games(db, name="100%")] == ["100% Orange Juice"]


def test_exists_never_loads_the_row(db, statements):
    genre_id = create_genre(db, "Roguelike")
    statements.clear()

    assert row_exists(db, Genre, exact(Genre.id, genre_id))
    assert not row_exists(db, Genre, exact(Genre.id, genre_id + 1))
    assert all("count(" in s.lower() for s in statements)
