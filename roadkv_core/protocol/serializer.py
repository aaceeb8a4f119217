"""RoadKV Serializer - Value Codecs.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from roadkv_core.errors import SerializationError

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract codec between application values and stored payloads.

    A payload is whatever ends up under ``"value"`` in the persisted
    document, so it must itself be JSON-representable. The store never
    looks inside a payload.
    """

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Get format name."""
        pass

    @abstractmethod
    def serialize(self, value: Any) -> Any:
        """Serialize value to a payload.

        Args:
            value: Application value

        Returns:
            JSON-representable payload

        Raises:
            SerializationError: If the value cannot be encoded
        """
        pass

    @abstractmethod
    def deserialize(self, payload: Any) -> Any:
        """Deserialize payload to a value.

        Args:
            payload: Stored payload

        Returns:
            Application value

        Raises:
            SerializationError: If the payload cannot be decoded
        """
        pass


class JSONSerializer(Serializer):
    """Stores values as native JSON in the document.

    Values are normalized through a JSON round-trip on the way in, so what
    ``get`` returns is exactly what a reload would return (tuples become
    lists, for instance). Non-JSON types are rejected instead of being
    stringified.
    """

    @property
    def format_name(self) -> str:
        return "json"

    def serialize(self, value: Any) -> Any:
        try:
            return json.loads(json.dumps(value, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode {type(value).__name__}: {e}") from e

    def deserialize(self, payload: Any) -> Any:
        # Payload came out of a JSON document; copy so callers can't
        # mutate the stored entry through the returned object.
        try:
            return json.loads(json.dumps(payload, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot decode payload: {e}") from e


class JSONStringSerializer(Serializer):
    """Stores each value as a JSON text string inside the document.

    Useful when the document is handed to tools that should treat values
    as opaque strings.
    """

    @property
    def format_name(self) -> str:
        return "json-string"

    def serialize(self, value: Any) -> str:
        try:
            return json.dumps(value, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot encode {type(value).__name__}: {e}") from e

    def deserialize(self, payload: Any) -> Any:
        if not isinstance(payload, str):
            raise SerializationError(
                f"Expected JSON string payload, got {type(payload).__name__}"
            )
        try:
            return json.loads(payload)
        except ValueError as e:
            raise SerializationError(f"Cannot decode payload: {e}") from e


class SerializerRegistry:
    """Registry of value codecs."""

    def __init__(self):
        self._serializers: Dict[str, Serializer] = {}
        self._default: str = "json"

        self.register(JSONSerializer())
        self.register(JSONStringSerializer())

    def register(self, serializer: Serializer) -> None:
        """Register a serializer.

        Args:
            serializer: Serializer to register
        """
        self._serializers[serializer.format_name] = serializer
        logger.debug(f"Registered serializer {serializer.format_name!r}")

    def get(self, format_name: str) -> Serializer:
        """Get serializer by format.

        Args:
            format_name: Format name

        Returns:
            Serializer instance

        Raises:
            ValueError: If format not found
        """
        if format_name not in self._serializers:
            raise ValueError(f"Unknown serializer format: {format_name}")
        return self._serializers[format_name]

    def get_default(self) -> Serializer:
        return self._serializers[self._default]

    def set_default(self, format_name: str) -> None:
        """Set default serializer.

        Args:
            format_name: Format name
        """
        if format_name not in self._serializers:
            raise ValueError(f"Unknown serializer format: {format_name}")
        self._default = format_name

    def list_formats(self) -> List[str]:
        return list(self._serializers.keys())


# Global registry
_registry = SerializerRegistry()


def get_serializer(format_name: Optional[str] = None) -> Serializer:
    """Get serializer by format.

    Args:
        format_name: Format name or None for default

    Returns:
        Serializer instance
    """
    if format_name is None:
        return _registry.get_default()
    return _registry.get(format_name)


def register_serializer(serializer: Serializer) -> None:
    """Register a serializer in the global registry."""
    _registry.register(serializer)


__all__ = [
    "Serializer",
    "JSONSerializer",
    "JSONStringSerializer",
    "SerializerRegistry",
    "get_serializer",
    "register_serializer",
]
