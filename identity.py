# identity.py
from typing import Optional

from azure.core.credentials import TokenCredential
from azure.identity import DefaultAzureCredential


class CredentialError(RuntimeError):
    """The credential chain could not be constructed."""


def build_credential(managed_identity_client_id: Optional[str] = None) -> TokenCredential:
    """
    Returns the process-wide credential shared by every Azure SDK client.
    DefaultAzureCredential tries (in order):
      - Environment variables (AZURE_CLIENT_ID, AZURE_TENANT_ID, AZURE_CLIENT_SECRET)
      - Workload identity
      - Managed identity (pinned to managed_identity_client_id when given)
      - Developer tooling (Azure CLI, Azure PowerShell, azd)
    Tokens are acquired and cached by the credential itself on first use.
    """
    try:
        if managed_identity_client_id:
            return DefaultAzureCredential(managed_identity_client_id=managed_identity_client_id)
        return DefaultAzureCredential()
    except Exception as e:
        raise CredentialError(f"Failed to build Azure credential chain: {e}") from e
