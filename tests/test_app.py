from __future__ import annotations

import pytest
from azure.core.exceptions import HttpResponseError

from app import create_app
from clients import ServiceClients
from fakes import FakeCredential, FakeSubscriptionClient, make_sub
from settings import Settings


def _app(subscription_client, testing=True, **settings_kwargs):
    settings = Settings(app_version="9.9.9", **settings_kwargs)
    clients = ServiceClients(FakeCredential(), settings)
    clients.subscription_client = subscription_client
    app = create_app(settings=settings, clients=clients)
    app.testing = testing
    return app


@pytest.fixture
def client():
    sub_client = FakeSubscriptionClient(
        [
            [make_sub("sub-1", "Prod", "Enabled", "tenant-a")],
            [make_sub("sub-2", "<Test & Dev>", None, None)],
        ]
    )
    return _app(sub_client).test_client()


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_version_reports_configured_clients():
    app = _app(FakeSubscriptionClient([[]]), storage_url="https://acct.blob.core.windows.net")
    r = app.test_client().get("/version")
    data = r.get_json()
    assert data["version"] == "9.9.9"
    assert data["clients"] == {"subscriptions": True, "blob_storage": True, "cosmos_db": False}


def test_subscriptions_json(client):
    r = client.get("/subscriptions")
    assert r.status_code == 200
    data = r.get_json()
    assert data["count"] == 2
    assert data["enabled_count"] == 1
    assert data["subscriptions"] == [
        {"subscriptionId": "sub-1", "displayName": "Prod", "state": "Enabled", "tenantId": "tenant-a"},
        {"subscriptionId": "sub-2", "displayName": "<Test & Dev>", "state": "Unknown", "tenantId": "Unknown"},
    ]


def test_subscriptions_json_upstream_failure():
    err = HttpResponseError(message="Forbidden")
    app = _app(FakeSubscriptionClient([[make_sub("s1", "One", "Enabled", "t")], []], fail_on_page=1, error=err))
    r = app.test_client().get("/subscriptions")
    assert r.status_code == 502
    data = r.get_json()
    assert data["error"] == "ARM subscriptions call failed"
    assert "Forbidden" in data["details"]
    assert "subscriptions" not in data


def test_index_renders_escaped_table(client):
    r = client.get("/")
    assert r.status_code == 200
    html = r.get_data(as_text=True)
    assert "Prod" in html
    assert "&lt;Test &amp; Dev&gt;" in html
    assert "<Test & Dev>" not in html
    assert html.index("sub-1") < html.index("sub-2")


def test_index_empty():
    app = _app(FakeSubscriptionClient([[]]))
    html = app.test_client().get("/").get_data(as_text=True)
    assert "No subscriptions visible" in html


def test_index_upstream_failure_hides_details_in_production():
    err = HttpResponseError(message="token expired")
    app = _app(FakeSubscriptionClient([[]], fail_on_page=0, error=err))
    r = app.test_client().get("/")
    assert r.status_code == 502
    html = r.get_data(as_text=True)
    assert "Could not load subscriptions" in html
    assert "token expired" not in html


def test_index_upstream_failure_shows_details_in_development():
    err = HttpResponseError(message="token expired")
    app = _app(FakeSubscriptionClient([[]], fail_on_page=0, error=err), environment="Development")
    r = app.test_client().get("/")
    assert r.status_code == 502
    assert "token expired" in r.get_data(as_text=True)


def test_error_page(client):
    r = client.get("/error")
    assert r.status_code == 500
    assert "An error occurred" in r.get_data(as_text=True)


def test_unhandled_error_renders_error_page_in_production():
    broken = FakeSubscriptionClient([[]], fail_on_page=0, error=RuntimeError("kaboom"))
    app = _app(broken, testing=False, environment="Production")
    r = app.test_client().get("/")
    assert r.status_code == 500
    html = r.get_data(as_text=True)
    assert "An error occurred" in html
    assert "kaboom" not in html


def test_unhandled_error_propagates_in_development():
    broken = FakeSubscriptionClient([[]], fail_on_page=0, error=RuntimeError("kaboom"))
    app = _app(broken, environment="Development")
    with pytest.raises(RuntimeError, match="kaboom"):
        app.test_client().get("/")


def test_debug_setting_reaches_request_service(capsys):
    app = _app(FakeSubscriptionClient([[make_sub("s1", "One", "Enabled", "t")]]), debug=True)
    app.test_client().get("/subscriptions")
    assert "[SUBS][DEBUG] listed 1 subscriptions" in capsys.readouterr().out


def test_service_is_created_per_request_with_shared_client():
    sub_client = FakeSubscriptionClient([[make_sub("s1", "One", "Enabled", "t")]])
    c = _app(sub_client).test_client()
    c.get("/subscriptions")
    c.get("/subscriptions")
    assert sub_client.subscriptions.list_calls == 2
