from __future__ import annotations

import logging
from typing import Any

import httpx

from catalog_sync.sync.notices import OperatorNotices

logger = logging.getLogger(__name__)


class CatalogIntegration:
    """Product integration backed by the external catalog HTTP API.

    Publishing is a plain PUT of the queued item. Errors are raised to the
    caller; the queue runtime decides what happens to a failed item.
    """

    def __init__(
        self,
        notices: OperatorNotices,
        *,
        sync_in_progress_key: str,
        sync_remaining_key: str,
        sync_timeout: int,
        api_url: str | None = None,
        api_token: str | None = None,
        http_client: httpx.Client | None = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.notices = notices
        self.sync_in_progress_key = sync_in_progress_key
        self.sync_remaining_key = sync_remaining_key
        self.sync_timeout = int(sync_timeout)

        self._api_url = (api_url or "").rstrip("/")
        self._headers = {"Accept": "application/json"}
        if api_token:
            self._headers["Authorization"] = f"Bearer {api_token}"
        self._http = http_client or httpx.Client(timeout=timeout_seconds)

    def on_product_publish(self, item: Any) -> None:
        if not self._api_url:
            logger.warning("catalog_api_url is not set; skipping product publish", extra={"queue_item": item})
            return

        if not isinstance(item, dict) or not item.get("product_id"):
            raise ValueError(f"Queue item has no product_id: {item!r}")

        product_id = str(item["product_id"])
        response = self._http.put(
            f"{self._api_url}/products/{product_id}",
            json=item.get("payload") or {},
            headers=self._headers,
        )
        response.raise_for_status()
        logger.info("Product published to catalog", extra={"product_id": product_id})

    def display_sticky_message(self, text: str, persistent: bool = False) -> None:
        self.notices.set_sticky(text, persistent)

    def remove_sticky_message(self) -> None:
        self.notices.clear_sticky()

    def display_info_message(self, text: str) -> None:
        self.notices.post_info(text)

    def close(self) -> None:
        self._http.close()
