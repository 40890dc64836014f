"""Data references attached to unit and facet nodes.

A data reference either points at a URL or wraps an inline values blob. Inline
blobs are treated as immutable shared content: copies share the same blob and
deduplication during compilation keys on blob identity, never on deep
equality, so large datasets are never walked or compared.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidValueError
from .schema import DATASET_NAME_PREFIX

logger = logging.getLogger(__name__)

_IDENTITY_KEYS = ("url", "values", "name")


@dataclass(frozen=True, slots=True)
class DataReference:
    """A URL or inline-values data reference plus extra options.

    Args:
        url: Data URL, passed through to the renderer unmodified.
        values: Inline values blob (shared, never cloned).
        options: Additional data properties such as `format`.
    """

    url: str | None = None
    values: Any = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_source(cls, source: object, options: Mapping[str, Any] | None = None) -> DataReference:
        """Build a reference from a builder-facing data argument.

        Args:
            source: A URL string, or a list/tuple/dict of inline values.
            options: Extra data properties merged into the reference.

        Returns:
            DataReference wrapping the source.

        Raises:
            InvalidValueError: When the source is neither a string nor an inline collection,
                or when options try to override `url`/`values`.
        """

        extra = dict(options or {})
        reserved = sorted(set(extra) & {"url", "values"})
        if reserved:
            raise InvalidValueError(f"Data options cannot override {reserved}.")
        if isinstance(source, str):
            return cls(url=source, options=extra)
        if isinstance(source, (list, tuple, dict)):
            return cls(values=source, options=extra)
        raise InvalidValueError(f"Invalid data source: expected URL string or inline values, got {type(source).__name__}.")

    @property
    def is_inline(self) -> bool:
        """Whether the reference wraps an inline values blob."""

        return self.values is not None

    def copy(self) -> DataReference:
        """Copy the reference, cloning options but sharing the values blob."""

        return DataReference(url=self.url, values=self.values, options=copy.deepcopy(self.options))

    def to_dict(self, *, dataset_name: str | None = None) -> dict[str, Any]:
        """Render the reference as a grammar data object.

        Args:
            dataset_name: When set, an inline reference is rendered by name
                instead of embedding its values.

        Returns:
            A fresh dict; only the values blob (if embedded) is shared.
        """

        payload: dict[str, Any] = {}
        if self.is_inline:
            if dataset_name:
                payload["name"] = dataset_name
            else:
                payload["values"] = self.values
        else:
            payload["url"] = self.url
        payload.update(copy.deepcopy(self.options))
        return payload


def references_equal(first: Mapping[str, Any], second: Mapping[str, Any]) -> bool:
    """Compare two resolved data objects by identity of their key fields.

    Two references are equal when they share a non-empty `url`, the same
    `values` object, or a non-empty `name`. Any one shared field is enough.

    Args:
        first: Resolved data object.
        second: Resolved data object.

    Returns:
        True when the references point at the same data.
    """

    for key in _IDENTITY_KEYS:
        value = first.get(key)
        if key == "values":
            if value is not None and value is second.get(key):
                return True
        elif value and value == second.get(key):
            return True
    return False


class DatasetRegistry:
    """Assign stable dataset names to inline blobs by first encounter.

    The registry lives for a single compile call.
    """

    def __init__(self) -> None:
        self._names: dict[int, str] = {}
        self._blobs: list[Any] = []

    def __len__(self) -> int:
        return len(self._blobs)

    def name_for(self, values: Any) -> str:
        """Return the dataset name for a blob, registering it when unseen.

        Args:
            values: Inline values blob, keyed by identity.

        Returns:
            Dataset name such as `ds_0`.
        """

        name = self._names.get(id(values))
        if name is None:
            name = f"{DATASET_NAME_PREFIX}{len(self._blobs)}"
            self._names[id(values)] = name
            # Holding the blob keeps its id() from being reused during the compile.
            self._blobs.append(values)
            logger.debug("Registered inline dataset %s", name)
        return name

    def as_table(self) -> dict[str, Any]:
        """Return the dataset table mapping names to their original blobs."""

        return {f"{DATASET_NAME_PREFIX}{index}": blob for index, blob in enumerate(self._blobs)}
