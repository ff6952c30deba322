# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Per-node settings and their parent-to-child merge.

Every node carries an effective TreeModelSettings computed once, at
construction, from three layers (lowest priority first):

1. DEFAULTS
2. the parent's effective settings, minus NOT_CASCADING_SETTINGS
3. the node's own ``settings`` mapping from its TreeModel

Example:
    >>> root = TreeModelSettings.merge({'settings': {'static': True}})
    >>> child = TreeModelSettings.merge({'value': 'x'}, root)
    >>> child.static
    True
    >>> TreeModelSettings.merge({'settings': {'static': False}}, root).static
    False
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from .exceptions import InvalidTreeModelError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TreeModelSettings:
    """Effective settings of a node.

    Attributes:
        static: Node and subtree refuse every structural or value change.
        left_menu: The widget may open its left-click menu on the node.
        right_menu: The widget may open its context menu on the node.
        is_collapsed_on_init: Branches start collapsed instead of expanded.
        selection_allowed: The node can be selected. Never inherited.
    """

    static: bool = False
    left_menu: bool = False
    right_menu: bool = True
    is_collapsed_on_init: bool = False
    selection_allowed: bool = True

    NOT_CASCADING_SETTINGS = ('selection_allowed',)

    @classmethod
    def option_names(cls) -> tuple[str, ...]:
        """Names of the recognized options."""
        return tuple(f.name for f in fields(cls))

    @classmethod
    def merge(
        cls,
        model: Mapping[str, Any],
        parent_settings: TreeModelSettings | None = None,
    ) -> TreeModelSettings:
        """Compute the effective settings for the node described by model.

        Args:
            model: The node's TreeModel. Only its ``settings`` key is read.
            parent_settings: Effective settings of the parent node, or None
                for a root.

        Returns:
            A new TreeModelSettings instance.

        Raises:
            InvalidTreeModelError: If ``model['settings']`` is not a mapping.
        """
        merged: dict[str, Any] = {}
        if parent_settings is not None:
            merged.update(
                (name, value)
                for name, value in asdict(parent_settings).items()
                if name not in cls.NOT_CASCADING_SETTINGS
            )
        merged.update(local_settings(model))
        return cls(**merged)

    def with_overrides(self, **overrides: Any) -> TreeModelSettings:
        """Return a copy with the given options replaced."""
        return replace(self, **_known_options(overrides))

    def as_dict(self) -> dict[str, Any]:
        """Convert to plain dict."""
        return asdict(self)


def local_settings(model: Mapping[str, Any]) -> dict[str, Any]:
    """Extract the recognized settings overrides declared by a TreeModel.

    Returns a fresh dict, so the caller never shares state with model.
    """
    raw = model.get('settings')
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidTreeModelError(
            f"settings must be a mapping, not {type(raw).__name__}"
        )
    return _known_options(raw)


def _known_options(raw: Mapping[str, Any]) -> dict[str, bool]:
    # Every option is a flag
    names = TreeModelSettings.option_names()
    unknown = [key for key in raw if key not in names]
    if unknown:
        logger.debug("Ignoring unknown settings: %s", ', '.join(map(str, unknown)))
    return {key: bool(value) for key, value in raw.items() if key in names}
