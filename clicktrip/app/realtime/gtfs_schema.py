from __future__ import annotations

import importlib
import logging
import threading
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from google.protobuf import message_factory

from clicktrip.domain.exceptions import DecodeError, SchemaLoadError

logger = logging.getLogger(__name__)

SCHEMA_MODULE = "google.transit.gtfs_realtime_pb2"
FEED_MESSAGE_TYPE = "transit_realtime.FeedMessage"


@dataclass(frozen=True, slots=True)
class FeedSchema:
    """Read-only handle on the compiled GTFS-Realtime schema."""

    module: ModuleType

    def message_class(self, full_name: str) -> Any:
        pool = self.module.DESCRIPTOR.pool
        try:
            descriptor = pool.FindMessageTypeByName(full_name)
        except KeyError as exc:
            raise DecodeError(f"Schema has no message type {full_name!r}") from exc
        return message_factory.GetMessageClass(descriptor)


# Process-wide, initialised at most once and never mutated afterwards.
_schema: FeedSchema | None = None
_schema_lock = threading.Lock()


def get_feed_schema(module_name: str = SCHEMA_MODULE) -> FeedSchema:
    """Return the shared schema, loading it on first use.

    Concurrent first callers block on the lock; only one performs the load.
    A failed load leaves nothing cached so the next call tries again.
    """

    global _schema

    schema = _schema
    if schema is not None:
        return schema

    with _schema_lock:
        if _schema is None:
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                raise SchemaLoadError(
                    f"Unable to load GTFS-Realtime schema from {module_name}"
                ) from exc
            if not hasattr(module, "DESCRIPTOR"):
                raise SchemaLoadError(f"{module_name} is not a compiled protobuf module")
            logger.info("Loaded GTFS-Realtime schema from %s", module_name)
            _schema = FeedSchema(module=module)
        return _schema


def reset_feed_schema() -> None:
    """Forget the loaded schema. Only meant for tests."""

    global _schema
    with _schema_lock:
        _schema = None
