# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tree-view model exceptions.

Mutations never raise: invalid edits are refused silently. Exceptions are
reserved for malformed input handed to the constructors.
"""

from __future__ import annotations


class TreeViewError(Exception):
    """Base exception for tree-view model errors."""

    pass


class InvalidTreeModelError(TreeViewError, TypeError):
    """Raised when a tree description or its settings is not a mapping."""

    pass
