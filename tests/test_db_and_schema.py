from app.core.config import settings
from app.core.db import init_db, get_connection
from app.repo import schema


def test_init_db_creates_file_and_tables(tmp_path, monkeypatch):
    # point DB_PATH to a nested temp file
    temp_db = tmp_path / "data" / "test.db"
    monkeypatch.setattr(settings, "DB_PATH", str(temp_db))

    init_db()
    assert temp_db.exists()

    conn = get_connection()
    try:
        schema.create_tables(conn)
        # creating twice must not fail
        schema.create_tables(conn)

        cur = conn.cursor()
        for table in ("taxonomies", "taxonomy_object_types", "terms", "term_taxonomy", "posts", "term_relationships", "post_types"):
            cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
            assert cur.fetchone() is not None, table
    finally:
        conn.close()


def test_get_connection_accepts_explicit_path(tmp_path):
    db_file = tmp_path / "other.db"
    init_db(str(db_file))
    assert db_file.exists()
    conn = get_connection(str(db_file))
    try:
        assert conn.execute("SELECT 1").fetchone()[0] == 1
    finally:
        conn.close()
