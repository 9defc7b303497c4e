"""
app.py — Hello AZD subscription viewer (Flask on Azure App Service / Container Apps)

Auth model:
- The app itself signs in with DefaultAzureCredential (managed identity when hosted,
  developer tooling locally). AZURE_CLIENT_ID pins a user-assigned managed identity.
- The credential is built once at startup and shared by every SDK client.

Goal:
- / renders the subscriptions visible to that identity as an HTML table.
- /subscriptions returns the same list as JSON.
- /healthz is an unauthenticated probe for the platform health check.

Run:
- gunicorn "app:create_app()"
- python main.py serve
"""

from __future__ import annotations

from typing import Any, List, Optional

from dotenv import load_dotenv
from flask import Blueprint, Flask, current_app, jsonify

from clients import ServiceClients
from identity import build_credential
from settings import Settings, load_settings
from subscription_service import SubscriptionRecord, SubscriptionService, UpstreamError, summarize

bp = Blueprint("subscriptions", __name__)


# ----------------------------
# Helpers
# ----------------------------
def _html_escape(s: Any) -> str:
    t = "" if s is None else str(s)
    return (
        t.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _settings() -> Settings:
    return current_app.config["HELLO_AZD_SETTINGS"]


def _subscription_service() -> SubscriptionService:
    clients: ServiceClients = current_app.extensions["service_clients"]
    return SubscriptionService(clients.subscription_client, debug=_settings().debug)


def _page_shell(title: str, body_html: str) -> str:
    css = """
    body { font-family: Arial, sans-serif; margin: 24px; max-width: 1050px; color: #111; }
    h1 { margin: 0 0 6px 0; }
    .muted { color: #555; font-size: 13px; margin-bottom: 16px; }
    table { border-collapse: collapse; width: 100%; }
    th, td { border: 1px solid #ccc; padding: 6px 8px; font-size: 13px; vertical-align: top; }
    th { background: #f0f0f0; text-align: left; }
    code { background: #eee; padding: 1px 4px; border-radius: 4px; }
    .warn { background:#fff3cd; border:1px solid #ffe69c; padding:10px 12px; border-radius:8px; }
    """
    return f"""<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>{_html_escape(title)}</title>
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <style>{css}</style>
</head>
<body>
  <h1>{_html_escape(title)}</h1>
  {body_html}
</body>
</html>"""


def _render_subscriptions(records: List[SubscriptionRecord]) -> str:
    if not records:
        return "<p class='muted'>No subscriptions visible for this identity.</p>"

    rows = []
    for r in records:
        rows.append(
            "<tr>"
            f"<td>{_html_escape(r.display_name)}</td>"
            f"<td><code>{_html_escape(r.subscription_id)}</code></td>"
            f"<td>{_html_escape(r.state)}</td>"
            f"<td><code>{_html_escape(r.tenant_id)}</code></td>"
            "</tr>"
        )
    return f"""
    <div class="muted">{len(records)} subscription(s)</div>
    <table>
      <tr>
        <th style="width:30%;">Name</th>
        <th style="width:30%;">Subscription ID</th>
        <th style="width:10%;">State</th>
        <th style="width:30%;">Tenant ID</th>
      </tr>
      {''.join(rows)}
    </table>"""


# ----------------------------
# Routes
# ----------------------------
@bp.get("/healthz")
def healthz():
    return "ok", 200


@bp.get("/version")
def version():
    s = _settings()
    clients: ServiceClients = current_app.extensions["service_clients"]
    return jsonify(
        {
            "status": "ok",
            "version": s.app_version,
            "environment": s.environment,
            "clients": clients.configured(),
        }
    )


@bp.get("/subscriptions")
def subscriptions():
    try:
        records = _subscription_service().get_subscriptions()
    except UpstreamError as e:
        print(f"[WARN] Subscription listing failed: {e}")
        return (
            jsonify(
                {
                    "error": "ARM subscriptions call failed",
                    "details": str(e),
                    "status_code": e.status_code,
                }
            ),
            502,
        )
    return jsonify(summarize(records))


@bp.get("/")
def index():
    try:
        records = _subscription_service().get_subscriptions()
    except UpstreamError as e:
        print(f"[WARN] Subscription listing failed: {e}")
        details = f"<br/><code>{_html_escape(e)}</code>" if _settings().is_development else ""
        body = f"<div class='warn'><b>Could not load subscriptions.</b>{details}</div>"
        return _page_shell("Azure Subscriptions", body), 502
    return _page_shell("Azure Subscriptions", _render_subscriptions(records))


@bp.get("/error")
def error_page():
    body = (
        "<div class='warn'>An error occurred while processing your request.</div>"
        "<p class='muted'>Set <code>APP_ENV=Development</code> to see detailed errors.</p>"
    )
    return _page_shell("Error", body), 500


def _unhandled_error(e):
    print(f"[ERROR] Unhandled exception: {e!r}")
    return error_page()


# ----------------------------
# Factory
# ----------------------------
def create_app(settings: Optional[Settings] = None, clients: Optional[ServiceClients] = None) -> Flask:
    """
    Build the Flask app.

    The credential and client registry are created once here and reused by every
    request. Tests pass their own `clients` to avoid touching Azure.
    """
    if settings is None:
        load_dotenv()
        settings = load_settings()

    if clients is None:
        credential = build_credential(settings.azure_client_id)
        clients = ServiceClients(credential, settings)

    app = Flask(__name__)
    app.config["HELLO_AZD_SETTINGS"] = settings
    app.extensions["service_clients"] = clients
    app.register_blueprint(bp)

    if not settings.is_development:
        app.register_error_handler(500, _unhandled_error)

    print(f"[INFO] Hello AZD {settings.app_version} started ({settings.environment})")
    return app
