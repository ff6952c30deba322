# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeView - Mutable node model for tree-view widgets.

A lightweight, zero-dependency library providing the hierarchical node
model that tree-view widgets of the Genro ecosystem render and edit.
"""

__version__ = "0.1.0"

from .channel import ChildrenChannel
from .exceptions import InvalidTreeModelError, TreeViewError
from .node import TreeNode
from .settings import TreeModelSettings
from .types import (
    ChildrenLoadingState,
    FoldingType,
    Renamable,
    TreeModel,
    is_renamable,
    is_value_empty,
)

__all__ = [
    # Core classes
    "TreeNode",
    "TreeModelSettings",
    "ChildrenChannel",
    # Types
    "TreeModel",
    "FoldingType",
    "ChildrenLoadingState",
    "Renamable",
    "is_renamable",
    "is_value_empty",
    # Exceptions
    "TreeViewError",
    "InvalidTreeModelError",
]
