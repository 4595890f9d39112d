import pytest

from app.repo.relations import insert_post, relate
from app.repo.taxonomies import (
    get_taxonomies,
    get_taxonomy,
    post_type_exists,
    register_post_type,
    register_taxonomy,
)
from app.repo.terms import (
    COUNT_CALLBACKS,
    count_terms,
    get_term_by_tt_id,
    insert_term,
    list_terms,
    register_count_callback,
    set_cached_count,
    update_term_count_now,
)


def test_taxonomy_registry_roundtrip(conn):
    register_post_type(conn, "post")
    register_post_type(conn, "post")
    register_taxonomy(conn, "topic", ["post", "page:landing"])
    register_taxonomy(conn, "format", [], update_count_callback="generic")

    assert post_type_exists(conn, "post")
    assert not post_type_exists(conn, "page")

    topic = get_taxonomy(conn, "topic")
    assert topic["object_types"] == ["post", "page:landing"]
    assert topic["update_count_callback"] is None
    assert [t["name"] for t in get_taxonomies(conn)] == ["format", "topic"]
    assert get_taxonomy(conn, "missing") is None


def test_terms_are_listed_including_empty_ones(conn):
    register_taxonomy(conn, "topic", ["post"])
    register_taxonomy(conn, "place", ["post"])
    insert_term(conn, "topic", "b-news", count=4)
    insert_term(conn, "topic", "a-empty", count=0)
    insert_term(conn, "place", "rome")

    assert count_terms(conn, ["topic"]) == 2
    assert count_terms(conn, ["topic", "place"]) == 3
    assert count_terms(conn, []) == 0

    slugs = [t["slug"] for t in list_terms(conn, "topic")]
    assert slugs == ["a-empty", "b-news"]


def test_update_term_count_now_standard_recount(conn):
    register_post_type(conn, "post")
    register_taxonomy(conn, "topic", ["post", "attachment", "ghost"])
    term = insert_term(conn, "topic", "news", count=10)
    tt_id = term["term_taxonomy_id"]
    parent = insert_post(conn, "post", "publish")
    relate(conn, parent, [tt_id])
    relate(conn, insert_post(conn, "post", "draft"), [tt_id])
    relate(conn, insert_post(conn, "attachment", "inherit", parent), [tt_id])
    relate(conn, insert_post(conn, "ghost", "publish"), [tt_id])

    update_term_count_now(conn, [tt_id], "topic")

    assert get_term_by_tt_id(conn, tt_id)["count"] == 2


def test_update_term_count_now_uses_custom_callback(conn):
    register_taxonomy(conn, "format", ["post"], update_count_callback="generic")
    term = insert_term(conn, "format", "video", count=0)
    relate(conn, insert_post(conn, "post", "draft"), [term["term_taxonomy_id"]])
    relate(conn, insert_post(conn, "post", "publish"), [term["term_taxonomy_id"]])

    update_term_count_now(conn, [term["term_taxonomy_id"]], "format")

    assert get_term_by_tt_id(conn, term["term_taxonomy_id"])["count"] == 2


def test_register_count_callback(conn, monkeypatch):
    monkeypatch.setattr("app.repo.terms.COUNT_CALLBACKS", dict(COUNT_CALLBACKS))
    calls = []

    def fixed_seven(connection, tt_ids, taxonomy):
        calls.append((list(tt_ids), taxonomy["name"]))
        for tt_id in tt_ids:
            set_cached_count(connection, tt_id, 7)

    register_count_callback("seven", fixed_seven)
    register_taxonomy(conn, "rating", ["post"], update_count_callback="seven")
    term = insert_term(conn, "rating", "five-stars")

    update_term_count_now(conn, [term["term_taxonomy_id"]], "rating")

    assert calls == [([term["term_taxonomy_id"]], "rating")]
    assert get_term_by_tt_id(conn, term["term_taxonomy_id"])["count"] == 7


def test_update_term_count_now_errors(conn):
    with pytest.raises(ValueError):
        update_term_count_now(conn, [1], "missing")

    register_taxonomy(conn, "odd", ["post"], update_count_callback="does_not_exist")
    term = insert_term(conn, "odd", "x")
    with pytest.raises(ValueError):
        update_term_count_now(conn, [term["term_taxonomy_id"]], "odd")
