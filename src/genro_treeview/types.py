# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared types for the tree-view node model.

This module provides:
- FoldingType: expand/collapse/leaf UI state of a node
- ChildrenLoadingState: progress of a node's asynchronous child loading
- TreeModel: the declarative description a TreeNode is built from
- Renamable: the structural protocol for values that rename themselves
- is_renamable / is_value_empty: value predicates used by assignment
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, Sequence, TypedDict


class FoldingType(Enum):
    """Folding state of a node as shown by the widget."""

    LEAF = 'leaf'
    EXPANDED = 'expanded'
    COLLAPSED = 'collapsed'


class ChildrenLoadingState(Enum):
    """Progress of the asynchronous children loader."""

    NOT_STARTED = 'not_started'
    LOADING = 'loading'
    COMPLETED = 'completed'


ChildrenLoadedCallback = Callable[[Sequence['TreeModel'] | None], None]
ChildrenLoader = Callable[[ChildrenLoadedCallback], None]


class TreeModel(TypedDict, total=False):
    """Declarative description of a node and its subtree.

    Example:
        >>> model: TreeModel = {
        ...     'value': 'Fonts',
        ...     'settings': {'static': True},
        ...     'children': [{'value': 'Serif'}, {'value': 'Sans'}],
        ... }
    """

    id: Any
    value: Any
    children: Sequence['TreeModel'] | None
    settings: dict[str, Any]
    load_children: ChildrenLoader


class Renamable(Protocol):
    """A value that renames itself instead of being replaced."""

    def set_name(self, name: str) -> None: ...

    def __str__(self) -> str: ...


def is_renamable(value: Any) -> bool:
    """True if value exposes callable ``set_name`` and ``__str__``.

    The check is purely structural: an object with a non-callable
    ``set_name`` attribute is an ordinary value. Classes are never
    Renamable, only their instances.

    Example:
        >>> is_renamable('plain string')
        False
    """
    if isinstance(value, (str, type)):
        return False
    return (
        callable(getattr(value, 'set_name', None))
        and callable(getattr(value, '__str__', None))
    )


def is_value_empty(value: Any) -> bool:
    """True if the string form of value is blank.

    Renamable values are coerced with their own ``__str__``, anything
    else with ``str()``. Only the text matters, so ``0`` is not empty.

    Example:
        >>> is_value_empty(' \\n\\r\\t ')
        True
        >>> is_value_empty(' 42 ')
        False
    """
    return not str(value).strip()
