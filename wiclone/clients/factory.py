"""Builds the tracker client selected by configuration."""

from wiclone.clients.azure_cli_client import AzureCliClient
from wiclone.clients.base import IssueTrackerClient
from wiclone.clients.dry_run_client import DryRunClient
from wiclone.type_definitions import AzureConfig


def create_client(azure_config: AzureConfig, dry_run: bool = False) -> IssueTrackerClient:
    """Create the client for the configured backend.

    Args:
        azure_config: The ``azure`` configuration section
        dry_run: Wrap the client so that writes are only logged

    Returns:
        A client implementing IssueTrackerClient

    Raises:
        ValueError: If the backend is unknown or its settings are incomplete

    """
    backend = azure_config.get("backend", "cli")
    timeout = int(azure_config.get("timeout", 120))
    client: IssueTrackerClient

    match backend:
        case "cli":
            client = AzureCliClient(
                organization=azure_config.get("organization") or None,
                project=azure_config.get("project") or None,
                cli_path=azure_config.get("cli_path", "az"),
                timeout=timeout,
            )
        case "rest":
            from wiclone.clients.azure_rest_client import AzureRestClient  # noqa: PLC0415

            client = AzureRestClient(
                organization=azure_config.get("organization", ""),
                pat=azure_config.get("pat", ""),
                project=azure_config.get("project") or None,
                api_version=str(azure_config.get("api_version", "7.1")),
                timeout=timeout,
            )
        case _:
            msg = f"Unknown backend: {backend}"
            raise ValueError(msg)

    return DryRunClient(client) if dry_run else client
