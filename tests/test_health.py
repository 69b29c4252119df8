def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json().get("ok") is True


def test_health_bank(client):
    r = client.get("/health/bank")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_health_migrations_basic(client):
    r = client.get("/health/migrations")
    assert r.status_code == 200
    b = r.json()
    assert "code_heads" in b and isinstance(b["code_heads"], list)
    assert "db_version" in b
