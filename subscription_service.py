# subscription_service.py
"""
Subscription enumeration for the signed-in credential.

SubscriptionService is created per request around the shared
SubscriptionClient. get_subscriptions() drains the SDK's paged iterator
(one ARM "list subscriptions" call per page) into an ordered list, so the
caller either gets every record or an UpstreamError; never a partial list.

Design:
- No retries and no caching; each call starts a fresh server-side listing.
- Optional debug logging via env var HELLO_AZD_DEBUG=1 (Settings.debug)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Optional

from azure.core.exceptions import AzureError, DeserializationError, HttpResponseError

UNKNOWN = "Unknown"


class UpstreamError(Exception):
    """Listing subscriptions failed (auth, authorization, network or bad response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class SubscriptionRecord:
    subscription_id: str
    display_name: str
    state: str
    tenant_id: str

    def to_dict(self) -> Dict[str, str]:
        d = asdict(self)
        return {
            "subscriptionId": d["subscription_id"],
            "displayName": d["display_name"],
            "state": d["state"],
            "tenantId": d["tenant_id"],
        }


def _text_or_unknown(value: Any) -> str:
    if value is None:
        return UNKNOWN
    # SDK enums (e.g. SubscriptionState) are str-valued; use the wire value, not "SubscriptionState.ENABLED".
    return str(getattr(value, "value", value))


def to_record(sub: Any) -> SubscriptionRecord:
    return SubscriptionRecord(
        subscription_id=getattr(sub, "subscription_id", None) or "",
        display_name=getattr(sub, "display_name", None) or "",
        state=_text_or_unknown(getattr(sub, "state", None)),
        tenant_id=_text_or_unknown(getattr(sub, "tenant_id", None)),
    )


class SubscriptionService:
    def __init__(self, subscription_client, debug: bool = False):
        self._client = subscription_client
        self._debug = debug

    def _log_debug(self, msg: str) -> None:
        if self._debug:
            print(msg)

    def get_subscriptions(self) -> List[SubscriptionRecord]:
        subscriptions: List[SubscriptionRecord] = []
        try:
            for sub in self._client.subscriptions.list():
                subscriptions.append(to_record(sub))
        except HttpResponseError as e:
            raise UpstreamError(f"ARM subscriptions call failed: {e.message}", e.status_code) from e
        except (AzureError, DeserializationError) as e:
            raise UpstreamError(f"ARM subscriptions call failed: {e}") from e

        self._log_debug(f"[SUBS][DEBUG] listed {len(subscriptions)} subscriptions")
        return subscriptions


def summarize(records: Iterable[SubscriptionRecord]) -> Dict[str, Any]:
    simple = [r.to_dict() for r in records]
    enabled = [x for x in simple if x["state"].lower() == "enabled"]
    return {
        "count": len(simple),
        "enabled_count": len(enabled),
        "subscriptions": simple,
    }
