"""Request/response bridge used by the application shell.

Requests are identified by channel name. Each request maps onto one catalog
operation and, except for ``update-settings``, produces one response whose
payload lists entries in display form.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Sequence

from pydantic import BaseModel

from wxcat.catalog import Catalog
from wxcat.config.models import ScanOptions
from wxcat.discovery.models import CatalogEntry
from wxcat.settings import SettingsStore, settings_from_payload

LOGGER = logging.getLogger(__name__)

SCAN_REQUEST = "scan-wechat-files"
SEARCH_REQUEST = "search-files"
FILTER_REQUEST = "filter-files"
UPDATE_SETTINGS_REQUEST = "update-settings"

SCAN_COMPLETE = "scan-complete"
SCAN_ERROR = "scan-error"
SEARCH_RESULTS = "search-results"
FILTER_RESULTS = "filter-results"

_SIZE_UNITS = ("B", "KB", "MB", "GB")
_TWO_PLACES = Decimal("0.01")


class BridgeError(Exception):
    """Raised for unknown channels or malformed request payloads."""


class BridgeResponse(BaseModel):
    """A reply sent back to the application shell."""

    channel: str
    payload: Any = None


def format_file_size(size: int) -> str:
    """Render ``size`` bytes with a B/KB/MB/GB unit and at most two decimals.

    Halves round up, so 1664 bytes is ``1.63 KB``.
    """
    if size <= 0:
        return "0 B"
    value = float(size)
    unit_index = 0
    while value >= 1024 and unit_index < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    rounded = Decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    rendered = f"{rounded:f}".rstrip("0").rstrip(".")
    return f"{rendered} {_SIZE_UNITS[unit_index]}"


def format_entry(entry: CatalogEntry) -> dict[str, Any]:
    """Return the display form of ``entry`` sent to the shell."""
    payload = entry.model_dump(mode="json", by_alias=True)
    payload["size"] = format_file_size(entry.size)
    payload["modifyTime"] = entry.modify_time.date().isoformat()
    return payload


def format_entries(entries: Sequence[CatalogEntry]) -> list[dict[str, Any]]:
    return [format_entry(entry) for entry in entries]


class RequestHandler:
    """Dispatch shell requests onto a :class:`Catalog`."""

    def __init__(self, catalog: Catalog, store: SettingsStore | None = None) -> None:
        self.catalog = catalog
        self.store = store
        self.last_save_ok: bool | None = None
        self._routes: dict[str, Callable[[Any], BridgeResponse | None]] = {
            SCAN_REQUEST: self._scan,
            SEARCH_REQUEST: self._search,
            FILTER_REQUEST: self._filter,
            UPDATE_SETTINGS_REQUEST: self._update_settings,
        }

    @property
    def channels(self) -> tuple[str, ...]:
        return tuple(self._routes)

    def handle(self, channel: str, payload: Any = None) -> BridgeResponse | None:
        """Run the request on ``channel`` and return its response, if any.

        Raises:
            BridgeError: If the channel is unknown or the payload is malformed.
        """
        route = self._routes.get(channel)
        if route is None:
            raise BridgeError(f"Unknown request channel: {channel}")
        LOGGER.debug("Handling %s request", channel)
        return route(payload)

    def _scan(self, _: Any) -> BridgeResponse:
        try:
            entries = self.catalog.scan()
            formatted = format_entries(entries)
        except Exception as exc:
            LOGGER.exception("Scan failed")
            return BridgeResponse(channel=SCAN_ERROR, payload=str(exc))
        LOGGER.info("Scan complete, returning %d file(s)", len(formatted))
        return BridgeResponse(channel=SCAN_COMPLETE, payload=formatted)

    def _search(self, keyword: Any) -> BridgeResponse:
        if keyword is not None and not isinstance(keyword, str):
            raise BridgeError("search-files expects a keyword string.")
        return BridgeResponse(
            channel=SEARCH_RESULTS, payload=format_entries(self.catalog.search(keyword))
        )

    def _filter(self, file_type: Any) -> BridgeResponse:
        if not isinstance(file_type, str):
            raise BridgeError("filter-files expects a type string.")
        return BridgeResponse(
            channel=FILTER_RESULTS, payload=format_entries(self.catalog.filter_by_type(file_type))
        )

    def _update_settings(self, payload: Any) -> None:
        if payload is not None and not isinstance(payload, Mapping):
            raise BridgeError("update-settings expects an object payload.")
        settings = settings_from_payload(payload)
        self.catalog.set_custom_path(settings.custom_path)
        self.catalog.set_use_default_paths(settings.use_default_paths)
        LOGGER.info(
            "Scanner settings updated (custom path=%r, defaults=%s)",
            settings.custom_path,
            settings.use_default_paths,
        )
        if self.store is not None:
            self.last_save_ok = self.store.save(settings)
        return None


def create_handler(
    store: SettingsStore | None = None,
    *,
    options: ScanOptions | None = None,
) -> RequestHandler:
    """Wire a catalog from persisted settings and return its request handler."""
    store = store or SettingsStore()
    catalog = Catalog(store.load(), options=options)
    return RequestHandler(catalog, store)


__all__ = [
    "BridgeError",
    "BridgeResponse",
    "FILTER_REQUEST",
    "FILTER_RESULTS",
    "RequestHandler",
    "SCAN_COMPLETE",
    "SCAN_ERROR",
    "SCAN_REQUEST",
    "SEARCH_REQUEST",
    "SEARCH_RESULTS",
    "UPDATE_SETTINGS_REQUEST",
    "create_handler",
    "format_entries",
    "format_entry",
    "format_file_size",
]
