"""Azure DevOps REST client for work item operations.

Work item writes use JSON Patch documents
(``application/json-patch+json``); relations are appended to
``/relations/-``.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import requests

from wiclone import config
from wiclone.clients.base import RELATION_REFERENCE_NAMES, parse_work_item
from wiclone.clients.exceptions import (
    ApiError,
    AuthenticationError,
    ClientConnectionError,
    ClientTimeoutError,
    InvalidWorkItemError,
    JsonParseError,
    ResourceNotFoundError,
)
from wiclone.type_definitions import WorkItem, WorkItemId

logger = config.logger

HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_BAD_REQUEST_MIN = 400

JSON_PATCH = "application/json-patch+json"
WORK_ITEM_TYPE = "System.WorkItemType"
TEAM_PROJECT = "System.TeamProject"


class AzureRestClient:
    """Client for the Azure DevOps work item tracking REST API.

    Authenticates with a personal access token (basic auth, empty user name).
    """

    def __init__(
        self,
        organization: str,
        pat: str,
        project: str | None = None,
        api_version: str = "7.1",
        timeout: int = 120,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the REST client.

        Args:
            organization: Organization URL, e.g. https://dev.azure.com/contoso
            pat: Personal access token
            project: Project used for creation when the source item carries none
            api_version: REST API version
            timeout: Timeout per request in seconds
            session: Optional preconfigured session

        """
        if not organization:
            msg = "Azure DevOps organization URL is required"
            raise ValueError(msg)
        if not pat:
            msg = "Azure DevOps personal access token is required"
            raise ValueError(msg)

        self.base_url = organization.rstrip("/")
        self.project = project
        self.api_version = api_version
        self.timeout = timeout

        self.session = session or requests.Session()
        self.session.auth = ("", pat)
        self.session.headers.update({"Accept": "application/json"})

        logger.debug("AzureRestClient initialized for %s", self.base_url)

    def _work_item_url(self, work_item_id: WorkItemId) -> str:
        return f"{self.base_url}/_apis/wit/workitems/{work_item_id}"

    def _request(
        self,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> dict[str, Any]:
        params = {"api-version": self.api_version, **(params or {})}
        headers = {"Content-Type": JSON_PATCH} if json_body is not None else None

        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            msg = f"{method} {url} timed out after {self.timeout} seconds"
            raise ClientTimeoutError(msg) from e
        except requests.exceptions.RequestException as e:
            msg = f"Failed to reach Azure DevOps: {e}"
            raise ClientConnectionError(msg) from e

        status = response.status_code
        if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            msg = f"Authentication failed for {method} {url} (HTTP {status})"
            raise AuthenticationError(msg)
        if status == HTTP_NOT_FOUND:
            msg = f"Resource not found: {url}"
            raise ResourceNotFoundError(msg)
        if status >= HTTP_BAD_REQUEST_MIN:
            msg = f"{method} {url} failed with HTTP {status}: {response.text}"
            raise ApiError(msg, status_code=status)

        try:
            return response.json()
        except ValueError as e:
            msg = f"Invalid JSON in response from {url}: {e}"
            raise JsonParseError(msg) from e

    def get_work_item(self, work_item_id: WorkItemId) -> WorkItem:
        payload = self._request(
            "GET",
            self._work_item_url(work_item_id),
            params={"$expand": "relations"},
        )
        return parse_work_item(payload)

    def create_work_item(self, fields: Mapping[str, str]) -> WorkItemId:
        work_item_type = fields.get(WORK_ITEM_TYPE)
        if not work_item_type:
            msg = f"Cannot create a work item without {WORK_ITEM_TYPE}"
            raise InvalidWorkItemError(msg)
        project = fields.get(TEAM_PROJECT) or self.project
        if not project:
            msg = "Cannot create a work item without a project"
            raise InvalidWorkItemError(msg)

        operations = [
            {"op": "add", "path": f"/fields/{name}", "value": value}
            for name, value in fields.items()
            if name not in (WORK_ITEM_TYPE, TEAM_PROJECT)
        ]
        url = f"{self.base_url}/{quote(project)}/_apis/wit/workitems/${quote(work_item_type)}"
        payload = self._request("POST", url, json_body=operations)
        return int(payload["id"])

    def update_field(self, work_item_id: WorkItemId, field_name: str, value: str) -> None:
        self._request(
            "PATCH",
            self._work_item_url(work_item_id),
            json_body=[{"op": "add", "path": f"/fields/{field_name}", "value": value}],
        )

    def add_relation(
        self,
        work_item_id: WorkItemId,
        relation_type: str,
        target_id: WorkItemId,
    ) -> None:
        rel = RELATION_REFERENCE_NAMES.get(relation_type, relation_type)
        self._request(
            "PATCH",
            self._work_item_url(work_item_id),
            json_body=[
                {
                    "op": "add",
                    "path": "/relations/-",
                    "value": {"rel": rel, "url": self._work_item_url(target_id)},
                },
            ],
        )
