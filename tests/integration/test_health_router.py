from unittest.mock import MagicMock


def test_health_root(client):
    assert client.get("/health").json() == {"ok": True}

def test_health_storage_reports_bucket(client, monkeypatch):
    storage_client = MagicMock()
    storage_client.storage.get_bucket.return_value = MagicMock(public=True)
    monkeypatch.setattr("jobpost.health.service.get_service_supabase", lambda: storage_client)
    monkeypatch.setattr("jobpost.health.service.SUPABASE_URL", "")

    data = client.get("/health/storage").json()

    assert data["connect_ok"] is True
    assert data["bucket"]["ok"] is True
    assert data["bucket"]["public"] is True
    assert set(data["gateway"]) == {"secret_key", "public_key"}

def test_health_storage_unconfigured(client, monkeypatch):
    def _missing():
        raise RuntimeError("SUPABASE_URL/SUPABASE_SERVICE_KEY manquants")

    monkeypatch.setattr("jobpost.health.service.get_service_supabase", _missing)
    monkeypatch.setattr("jobpost.health.service.SUPABASE_URL", "")

    data = client.get("/health/storage").json()

    assert data["connect_ok"] is False
    assert "manquants" in data["error"]

def test_health_rate_limit(client):
    data = client.get("/health/rate-limit").json()
    assert data["enabled"] is False
