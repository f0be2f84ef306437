"""Resource handles over partial or full API representations.

Every BigQuery and Storage resource wraps the JSON representation returned by
the API (the "gapi") together with the connection that produced it. List and
create calls return partial representations; get and patch calls return full
ones. Completeness is tracked explicitly: accessors for fields that only full
representations carry fetch the full representation once and cache it.

Mutations send PATCH documents containing only the changed fields and replace
the cached representation with the server's response. ``update()`` batches
several changes into a single PATCH.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, Self

from gcloud_resources.connection import ApiResponse, Connection
from gcloud_resources.logging import get_logger

logger = get_logger(__name__)


def from_millis(value: object) -> datetime | None:
    """Convert integer milliseconds since the epoch (or an int64 string) to a datetime."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value) / 1000.0, tz=UTC)  # type: ignore[call-overload]


def from_rfc3339(value: object) -> datetime | None:
    """Convert an RFC 3339 timestamp string to a datetime."""
    if not value:
        return None
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def merge_patch(target: dict[str, Any], patch: dict[str, Any]) -> None:
    """Apply a patch document in place: nested objects merge, other values replace."""
    for key, value in patch.items():
        current = target.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            merge_patch(current, value)
        else:
            target[key] = value


class Resource(ABC):
    """Base class for a server-side resource with a cached representation."""

    connection: Connection

    def __init__(
        self,
        gapi: dict[str, Any],
        connection: Connection,
        complete: bool = False,
    ) -> None:
        """Initialize the handle.

        Args:
            gapi: Representation returned by the API.
            connection: Shared connection used for follow-up calls.
            complete: Whether the representation is the full one (get/patch)
                rather than a summary (list/create).
        """
        self._gapi = gapi
        self.connection = connection
        self._complete = complete
        # Only set on update() proxies
        self._baseline: dict[str, Any] | None = None
        self._pending: dict[str, Any] | None = None

    @classmethod
    def from_gapi(
        cls,
        gapi: dict[str, Any],
        connection: Connection,
        complete: bool = False,
    ) -> Self:
        """Create a handle from an API representation."""
        return cls(gapi, connection, complete=complete)

    @property
    def gapi(self) -> dict[str, Any]:
        """The cached representation (mirrors the REST resource schema)."""
        return self._gapi

    @property
    def is_complete(self) -> bool:
        """True when the cached representation is the full one."""
        return self._complete

    # ------------------------------------------------------------------
    # Hooks implemented by each resource type
    # ------------------------------------------------------------------

    @abstractmethod
    def _fetch(self) -> ApiResponse:
        """Issue the get call for this resource."""

    @abstractmethod
    def _send_patch(self, patch: dict[str, Any]) -> ApiResponse:
        """Issue the patch call for this resource."""

    # ------------------------------------------------------------------
    # Lazy loading
    # ------------------------------------------------------------------

    def reload(self) -> Self:
        """Fetch the full representation and replace the cached one.

        Returns:
            The resource itself.

        Raises:
            NotFound: If the resource no longer exists.
            ApiError: For any other non-success response.
        """
        response = self._fetch().raise_for_error()
        self._replace(response.body)
        logger.debug("resource_reloaded", resource=repr(self))
        return self

    refresh = reload

    def ensure_full(self) -> None:
        """Fetch the full representation unless it is already cached."""
        if not self._complete:
            self.reload()

    def get_attribute(self, name: str) -> Any:
        """Read a top-level field, fetching the full representation if it is missing.

        Args:
            name: Field name in the REST resource schema (e.g. "creationTime").

        Returns:
            The field value, or None if the full representation lacks it too.
        """
        if name in self._gapi:
            return self._gapi[name]
        self.ensure_full()
        return self._gapi.get(name)

    def _full(self, name: str) -> Any:
        """Read a field that only full representations carry."""
        self.ensure_full()
        return self._gapi.get(name)

    def _replace(self, gapi: Any) -> None:
        """Replace the cache with a full representation from the server."""
        fresh = gapi if isinstance(gapi, dict) else {}
        if self._pending is not None:
            # Update proxy: the fetched data becomes the new baseline and every
            # field changed so far in the block (setters and in-place edits)
            # is re-applied on top
            changes = self._changes()
            self._baseline = copy.deepcopy(fresh)
            fresh = copy.deepcopy(fresh)
            for key, value in changes.items():
                fresh[key] = copy.deepcopy(value)
        self._gapi = fresh
        self._complete = True

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def _patch_gapi(self, patch: dict[str, Any]) -> None:
        """Send a patch document and adopt the server's response.

        Inside an update() block the patch is only applied locally.

        Raises:
            ApiError: If the server rejects the patch; the cache is unchanged.
        """
        if self._pending is not None:
            merge_patch(self._pending, copy.deepcopy(patch))
            merge_patch(self._gapi, copy.deepcopy(patch))
            return

        response = self._send_patch(patch).raise_for_error()
        self._replace(response.body)
        logger.info("resource_patched", resource=repr(self), fields=sorted(patch))

    def _changes(self) -> dict[str, Any]:
        """Top-level fields of an update proxy that differ from its baseline."""
        baseline = self._baseline or {}
        changes = {
            key: value
            for key, value in self._gapi.items()
            if (key in baseline and baseline[key] != value)
            # Empty containers created by reading an absent field are not changes
            or (key not in baseline and value not in ([], {}))
        }
        for key in baseline:
            if key not in self._gapi:
                changes[key] = None
        return changes

    @contextmanager
    def update(self) -> Iterator[Self]:
        """Batch several changes into one patch request.

        Yields a proxy of the same type. Setters and in-place edits on the
        proxy are recorded locally; when the block exits normally a single
        patch with every changed field is sent. Nothing is sent if no field
        changed or if the block raises.

        Yields:
            The update proxy.

        Raises:
            ApiError: If the patch is rejected.
        """
        proxy = copy.copy(self)
        proxy._gapi = copy.deepcopy(self._gapi)
        proxy._baseline = copy.deepcopy(self._gapi)
        proxy._pending = {}

        yield proxy

        changes = proxy._changes()
        if changes:
            self._patch_gapi(changes)
        elif proxy._complete and not self._complete and proxy._baseline is not None:
            # The proxy loaded the full representation without changing it
            self._gapi = proxy._baseline
            self._complete = True
