"""Issue tracker clients for the work item cloner.

Lazily expose the client classes so that importing the package does not pull
in ``requests`` unless the REST backend is used.
"""

__all__ = ["AzureCliClient", "AzureRestClient", "DryRunClient", "create_client"]


def __getattr__(name: str) -> object:  # pragma: no cover - simple lazy import shim
    if name == "AzureCliClient":
        from .azure_cli_client import AzureCliClient as _AzureCliClient  # noqa: PLC0415

        return _AzureCliClient
    if name == "AzureRestClient":
        from .azure_rest_client import AzureRestClient as _AzureRestClient  # noqa: PLC0415

        return _AzureRestClient
    if name == "DryRunClient":
        from .dry_run_client import DryRunClient as _DryRunClient  # noqa: PLC0415

        return _DryRunClient
    if name == "create_client":
        from .factory import create_client as _create_client  # noqa: PLC0415

        return _create_client
    raise AttributeError(name)
