# clients.py
"""
Registry of the long-lived Azure SDK clients.

One instance is created at application startup with the shared credential.
The subscription client is built immediately; the Blob and Cosmos clients are
built on first access (under a lock, so concurrent first requests share one
instance) and reused for the life of the process. Request-scoped services
receive the client they need by reference.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from azure.core.credentials import TokenCredential
from azure.cosmos import CosmosClient
from azure.mgmt.resource import SubscriptionClient
from azure.storage.blob import BlobServiceClient

from settings import Settings


class ClientConfigurationError(RuntimeError):
    """A client was requested but its endpoint is not configured."""


class ServiceClients:
    def __init__(self, credential: TokenCredential, settings: Settings):
        self.credential = credential
        self.settings = settings
        self.subscription_client = SubscriptionClient(credential)
        self._lock = threading.Lock()
        self._blob_service: Optional[BlobServiceClient] = None
        self._cosmos: Optional[CosmosClient] = None

    @property
    def blob_service(self) -> BlobServiceClient:
        if not self.settings.storage_url:
            raise ClientConfigurationError("STORAGE_URL is not set; blob client unavailable.")
        with self._lock:
            if self._blob_service is None:
                self._blob_service = BlobServiceClient(
                    account_url=self.settings.storage_url, credential=self.credential
                )
            return self._blob_service

    @property
    def cosmos(self) -> CosmosClient:
        # CosmosClient contacts the account on construction, so it is only built on demand.
        if not self.settings.cosmos_endpoint:
            raise ClientConfigurationError(
                "AZURE_COSMOS_DB_NOSQL_ENDPOINT is not set; Cosmos DB client unavailable."
            )
        with self._lock:
            if self._cosmos is None:
                self._cosmos = CosmosClient(self.settings.cosmos_endpoint, credential=self.credential)
            return self._cosmos

    def configured(self) -> Dict[str, bool]:
        return {
            "subscriptions": True,
            "blob_storage": bool(self.settings.storage_url),
            "cosmos_db": bool(self.settings.cosmos_endpoint),
        }
