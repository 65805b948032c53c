"""Hosted node store adapter - HTTP client for a PostgREST-style table API."""

import logging
from datetime import datetime, timezone

import requests

from orgtracker.config import Config, load_config
from orgtracker.core.nodes import Node, NodeType
from orgtracker.errors import NodeNotFoundError, StoreError

from .file_store import serialize_fields

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"


class RestNodeStore:
    """
    Hosted table API adapter.

    Implements NodeStore protocol. Translates store filters into
    `column=op.value` query parameters. No business logic - just I/O.
    """

    def __init__(self, config: Config | None = None, session: requests.Session | None = None):
        self.config = config or load_config()
        if not self.config.store_url:
            raise StoreError("No STORE_URL configured. Add it to config/orgtracker.conf")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": self.config.store_api_key,
                "Authorization": f"Bearer {self.config.store_api_key}",
                "Content-Type": "application/json",
            }
        )

    @property
    def _table_url(self) -> str:
        return f"{self.config.store_url}{REST_PATH}/{self.config.store_table}"

    def _request(
        self,
        method: str,
        params: dict | None = None,
        json: dict | list | None = None,
        return_rows: bool = True,
    ) -> list[dict]:
        """Make an API request and return the affected rows."""
        headers = {"Prefer": "return=representation"} if return_rows and method != "GET" else {}
        try:
            resp = self._session.request(
                method,
                self._table_url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.config.request_timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Store request {method} {self.config.store_table} failed: {e}")
            raise StoreError(f"Store request failed: {e}") from e

        if not return_rows or not resp.content:
            return []
        return resp.json()

    def _base_params(self) -> dict:
        params = {"select": "*"}
        if self.config.user_id:
            params["user_id"] = f"eq.{self.config.user_id}"
        return params

    def fetch_nodes(
        self,
        category_id: str | None = None,
        node_type: NodeType | None = None,
        with_deadline: bool | None = None,
        completed: bool | None = None,
    ) -> list[Node]:
        """Fetch flat node records matching every given filter."""
        params = {**self._base_params(), "order": "id.asc"}
        if category_id is not None:
            params["category_id"] = f"eq.{category_id}"
        if node_type is not None:
            params["type"] = f"eq.{node_type.value}"
        if with_deadline is not None:
            params["deadline"] = "not.is.null" if with_deadline else "is.null"
        if completed is not None:
            params["is_completed"] = "is.true" if completed else "not.is.true"
        return [Node.from_row(row) for row in self._request("GET", params=params)]

    def get(self, node_id: int) -> Node:
        rows = self._request("GET", params={**self._base_params(), "id": f"eq.{node_id}"})
        if not rows:
            raise NodeNotFoundError(node_id)
        return Node.from_row(rows[0])

    def insert(self, fields: dict) -> Node:
        payload = serialize_fields(fields)
        if self.config.user_id and "user_id" not in payload:
            payload["user_id"] = self.config.user_id
        rows = self._request("POST", json=[payload])
        if not rows:
            raise StoreError("Insert returned no rows")
        return Node.from_row(rows[0])

    def update(self, node_id: int, fields: dict) -> Node:
        rows = self._request("PATCH", params={"id": f"eq.{node_id}"}, json=serialize_fields(fields))
        if not rows:
            raise NodeNotFoundError(node_id)
        return Node.from_row(rows[0])

    def delete(self, node_id: int) -> None:
        """Delete a record. Descendants cascade via the table's foreign key."""
        self._request("DELETE", params={"id": f"eq.{node_id}"}, return_rows=False)

    def find_recent_instances(
        self,
        name: str,
        template_id: int,
        parent_id: int | None,
        since: datetime,
    ) -> list[Node]:
        """Instances of a recurring lineage created at or after since."""
        params = {
            **self._base_params(),
            "type": "eq.task",
            "name": f"eq.{name}",
            "recurring_template_id": f"eq.{template_id}",
            "parent_id": "is.null" if parent_id is None else f"eq.{parent_id}",
            "created_at": f"gte.{since.astimezone(timezone.utc).isoformat()}",
        }
        return [Node.from_row(row) for row in self._request("GET", params=params)]
