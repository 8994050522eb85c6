"""
Test health endpoint for keycolors.
"""
from keycolors import __version__


def test_health_check(test_client):
    """Test health check reports service identity."""
    response = test_client.get("/healthz")

    assert response.status_code == 200
    data = response.json()

    # Check required fields
    assert data["ok"] is True
    assert data["version"] == __version__
    assert data["service"] == "keycolors"
