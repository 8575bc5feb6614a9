"""Tests de l'exposition Prometheus."""

from contactvault.core.http_constants import HTTP_OK


def test_metrics_endpoint_exposes_domain_counters(client, login):
    headers = login("user@famille.fr")
    client.post(
        "/calendar/next-occurrence",
        json={"calendar_type": "lunar", "original_day": 15, "original_month": 8},
        headers=headers,
    )
    r = client.get("/metrics")
    assert r.status_code == HTTP_OK
    text = r.text
    assert "http_requests_total" in text
    assert 'recurrence_resolutions_total{calendar_type="lunar",outcome="ok"}' in text
    assert "vault_gate_denials_total" in text


def test_request_metrics_use_route_templates(client, login, vault_factory):
    headers = login("user@famille.fr")
    vault_id = vault_factory(headers)
    client.get(f"/vaults/{vault_id}/contacts", headers=headers)
    text = client.get("/metrics").text
    assert 'route="/vaults/{vault_id}/contacts"' in text
    assert vault_id not in text
