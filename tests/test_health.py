def test_healthz(client):
    """Test : l'API et la base répondent"""
    response = client.get("/health/z")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}
