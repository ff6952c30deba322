# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeNode - the mutable node model behind a tree-view widget.

A TreeNode is materialized recursively from a declarative TreeModel and
then edited in place by the widget or the host application.

Key Features:
    - **Positional bookkeeping**: every child knows its index in the
      parent's children list, kept contiguous by every edit
    - **Renamable values**: values exposing ``set_name`` rename themselves
      on assignment instead of being replaced
    - **Static subtrees**: nodes whose merged settings say ``static``
      refuse every structural and value change
    - **Folding**: Leaf / Expanded / Collapsed state machine
    - **Lazy children**: a ``load_children`` function runs at most once,
      on the first expansion or the first subscription to
      ``children_async``

Invalid edits never raise: they are refused, logged at debug level, and
leave the tree untouched. Use the query properties (``is_static``,
``is_root``, ``has_sibling``...) to avoid them.

Example:
    >>> tree = TreeNode({
    ...     'value': 'Master',
    ...     'children': [{'value': 'Servant#1'}, {'value': 'Servant#2'}],
    ... })
    >>> node = tree.create_node(False)
    >>> node.position_in_parent, node.is_new, node.children
    (2, True, None)
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Sequence

from .channel import ChildrenChannel
from .exceptions import InvalidTreeModelError
from .settings import TreeModelSettings, local_settings
from .types import (
    ChildrenLoader,
    ChildrenLoadingState,
    FoldingType,
    TreeModel,
    is_renamable,
    is_value_empty,
)

logger = logging.getLogger(__name__)


class TreeNode:
    """A node of a tree-view hierarchy.

    Each node has:
    - value: opaque payload, or a Renamable object
    - children: list of child nodes, or None when no container exists yet
    - parent: the containing node (navigation only), None for roots
    - position_in_parent: index of this node in ``parent.children``
    - settings: effective TreeModelSettings merged from the parent
    - folding_type: FoldingType.LEAF, EXPANDED or COLLAPSED
    - children_async: ChildrenChannel firing once children are known

    Example:
        >>> tree = TreeNode({'value': 'Fonts', 'children': [{'value': 'Serif'}]})
        >>> tree.children[0].value
        'Serif'
        >>> tree.children[0].parent is tree
        True
    """

    __slots__ = (
        'id', 'parent', 'position_in_parent',
        '_value', '_children', '_settings', '_local_settings',
        '_folding_type', '_load_children', '_loading_state', '_children_async',
        '_is_new', '_is_modified', '_is_being_renamed',
    )

    def __init__(
        self,
        model: TreeModel | Mapping[str, Any],
        parent: TreeNode | None = None,
        position_in_parent: int = 0,
    ) -> None:
        """Build a node, and recursively its children, from a TreeModel.

        Args:
            model: Declarative description. Read once, never retained.
            parent: The node that will contain this one.
            position_in_parent: Index this node will occupy in
                ``parent.children``.

        Raises:
            InvalidTreeModelError: If model (or its settings) is not a mapping.
        """
        if not isinstance(model, Mapping):
            raise InvalidTreeModelError(
                f"model must be a mapping, not {type(model).__name__}"
            )
        self.id = model.get('id')
        self.parent = parent
        self.position_in_parent = position_in_parent

        self._value = _own_value(model.get('value'))

        self._settings = TreeModelSettings.merge(
            model, parent._settings if parent is not None else None
        )
        self._local_settings = local_settings(model)

        loader = model.get('load_children')
        self._load_children: ChildrenLoader | None = loader if callable(loader) else None
        self._loading_state = ChildrenLoadingState.NOT_STARTED

        self._children: list[TreeNode] | None = None
        children = model.get('children')
        if isinstance(children, (list, tuple)):
            self._children = self._build_children(children)
            # Explicit children satisfy the loader
            self._loading_state = ChildrenLoadingState.COMPLETED

        self._folding_type = self._initial_folding_type()
        self._is_new = False
        self._is_modified = False
        self._is_being_renamed = False
        self._children_async: ChildrenChannel | None = None
        if self.can_load_children:
            self._children_async = ChildrenChannel(on_demand=self._on_children_demanded)

    def __repr__(self) -> str:
        children = 'None' if self._children is None else len(self._children)
        return f"TreeNode({str(self._value)!r}, children={children})"

    def _build_children(self, models: Sequence[Mapping[str, Any]]) -> list[TreeNode]:
        return [
            self.__class__(child_model, parent=self, position_in_parent=index)
            for index, child_model in enumerate(models)
        ]

    def _initial_folding_type(self) -> FoldingType:
        if self._children is None:
            if self.can_load_children:
                return FoldingType.COLLAPSED
            return FoldingType.LEAF
        if self._settings.is_collapsed_on_init:
            return FoldingType.COLLAPSED
        return FoldingType.EXPANDED

    # ==================== Value ====================

    @property
    def value(self) -> Any:
        """The node's payload.

        Assignment accepts only non-blank strings and Renamable objects.
        When the current value is Renamable it is renamed in place with
        the string form of the new value. Rejected assignments are no-ops.
        """
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        if self._refused_as_static('set value'):
            return
        if not isinstance(value, str) and not is_renamable(value):
            logger.debug("Refusing value of type %s on %r", type(value).__name__, self)
            return
        if is_value_empty(value):
            logger.debug("Refusing empty value on %r", self)
            return
        if is_renamable(self._value):
            self._value.set_name(str(value))
        else:
            self._value = value

    # ==================== Queries ====================

    @property
    def children(self) -> list[TreeNode] | None:
        """Copy of the children list, or None if no container exists yet."""
        if self._children is None:
            return None
        return list(self._children)

    @property
    def settings(self) -> TreeModelSettings:
        return self._settings

    @property
    def is_leaf(self) -> bool:
        """True if the node has no children container (even if it can load one)."""
        return self._children is None

    @property
    def is_branch(self) -> bool:
        return not self.is_leaf

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def is_static(self) -> bool:
        return self._settings.static

    @property
    def has_children(self) -> bool:
        return bool(self._children)

    @property
    def can_load_children(self) -> bool:
        """True if a loader exists and has not been started yet."""
        return (
            self._load_children is not None
            and self._loading_state is ChildrenLoadingState.NOT_STARTED
        )

    @property
    def loading_state(self) -> ChildrenLoadingState:
        return self._loading_state

    @property
    def is_children_loading(self) -> bool:
        return self._loading_state is ChildrenLoadingState.LOADING

    def has_child(self, node: TreeNode) -> bool:
        """True if node is one of the direct children (identity match)."""
        return self._index_of(node) is not None

    def has_sibling(self, node: TreeNode) -> bool:
        """True if node shares this node's parent.

        A node counts as its own sibling. Roots have no siblings.
        """
        return self.parent is not None and self.parent.has_child(node)

    # ==================== Lifecycle flags ====================

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def is_modified(self) -> bool:
        return self._is_modified

    @property
    def is_being_renamed(self) -> bool:
        return self._is_being_renamed

    def mark_as_new(self) -> None:
        self._is_new = True

    def mark_as_modified(self) -> None:
        self._is_modified = True

    def mark_as_being_renamed(self) -> None:
        self._is_being_renamed = True

    # ==================== Folding ====================

    @property
    def folding_type(self) -> FoldingType:
        return self._folding_type

    @property
    def is_node_expanded(self) -> bool:
        return self._folding_type is FoldingType.EXPANDED

    def switch_folding_type(self) -> None:
        """Toggle between Expanded and Collapsed. Leaves never switch.

        Expanding a node whose children still have to be loaded starts
        the load.
        """
        if self._folding_type is FoldingType.LEAF:
            return
        if self._folding_type is FoldingType.EXPANDED:
            self._folding_type = FoldingType.COLLAPSED
            return
        self._folding_type = FoldingType.EXPANDED
        if self.can_load_children:
            self._children_async.demand()

    # ==================== Async children ====================

    @property
    def children_async(self) -> ChildrenChannel:
        """Channel publishing the children once they are known.

        For a node with a loader this is always the same channel: the
        first subscription triggers loading and every subscriber receives
        the loaded children. Any other node returns a new channel,
        already resolved with the children it holds now.

        Example:
            >>> node.children_async.subscribe(lambda children: print(len(children)))
        """
        if self._children_async is None:
            return ChildrenChannel.of(list(self._children or []))
        return self._children_async

    def _on_children_demanded(self) -> None:
        if self.can_load_children:
            self._start_loading()

    def _start_loading(self) -> None:
        self._loading_state = ChildrenLoadingState.LOADING
        logger.debug("Loading children of %r", self)
        self._load_children(self._on_children_loaded)

    def _on_children_loaded(self, models: Sequence[Mapping[str, Any]] | None) -> None:
        if self._loading_state is ChildrenLoadingState.COMPLETED:
            logger.warning("Children of %r already loaded, ignoring callback", self)
            return
        loaded = self._build_children(models or [])
        # Children added while loading keep their order after the loaded ones
        self._children = loaded + (self._children or [])
        self._reindex(len(loaded))
        self._loading_state = ChildrenLoadingState.COMPLETED
        logger.debug("Loaded %d children of %r", len(loaded), self)
        self._children_async.resolve(loaded)

    # ==================== Structure ====================

    def add_child(self, child: TreeNode, position: int | None = None) -> TreeNode | None:
        """Add a copy of child to this node's children.

        The new node is built from ``child.to_tree_model()``, with
        Renamable values shallow-copied, so child itself is left untouched
        and the two diverge from now on.

        Args:
            child: Node to copy.
            position: Insertion index. None appends, negative values count
                from the end, out-of-range values are clamped.

        Returns:
            The new node, or None if this node is static.
        """
        if self._refused_as_static('add child'):
            return None
        return self._insert_child(child._describe(clone=True), position)

    def add_sibling(self, sibling: TreeNode) -> TreeNode | None:
        """Add a copy of sibling right after this node.

        Returns:
            The new node, or None for roots and static parents.
        """
        if self.parent is None:
            return None
        return self.parent.add_child(sibling, self.position_in_parent + 1)

    def create_node(self, is_branch: bool) -> TreeNode | None:
        """Append a new blank child, marked as new.

        Args:
            is_branch: If True the child gets an empty children list,
                otherwise it is a leaf.

        Returns:
            The new node, or None if this node is static.
        """
        if self._refused_as_static('create node'):
            return None
        node = self._insert_child({'value': '', 'children': [] if is_branch else None})
        node.mark_as_new()
        return node

    def remove_child(self, child: TreeNode) -> None:
        """Unlink child from this node. No-op if it is not a direct child."""
        index = self._index_of(child)
        if index is None:
            return
        if self._refused_as_static('remove child') or child._refused_as_static('remove'):
            return
        del self._children[index]
        child.parent = None
        self._reindex(index)

    def remove_itself_from_parent(self) -> None:
        if self.parent is None:
            return
        self.parent.remove_child(self)

    def swap_with_sibling(self, sibling: TreeNode) -> None:
        """Exchange positions with sibling. No-op for anything but a true sibling."""
        parent = self.parent
        if parent is None or sibling is self or sibling.parent is not parent:
            return
        if (
            parent._refused_as_static('swap children')
            or self._refused_as_static('swap')
            or sibling._refused_as_static('swap')
        ):
            return
        mine, theirs = self.position_in_parent, sibling.position_in_parent
        parent._children[mine], parent._children[theirs] = sibling, self
        self.position_in_parent, sibling.position_in_parent = theirs, mine

    def _insert_child(
        self, model: Mapping[str, Any], position: int | None = None
    ) -> TreeNode:
        if self._children is None:
            self._children = []
            if self._folding_type is FoldingType.LEAF:
                self._folding_type = FoldingType.EXPANDED
        index = self._normalize_position(position)
        node = self.__class__(model, parent=self, position_in_parent=index)
        self._children.insert(index, node)
        self._reindex(index + 1)
        return node

    def _normalize_position(self, position: int | None) -> int:
        size = len(self._children)
        if position is None:
            return size
        if position < 0:
            position += size
        return min(max(position, 0), size)

    def _reindex(self, start: int = 0) -> None:
        """Restore position_in_parent of children from start onwards."""
        for index in range(start, len(self._children)):
            self._children[index].position_in_parent = index

    def _index_of(self, node: TreeNode) -> int | None:
        for index, child in enumerate(self._children or ()):
            if child is node:
                return index
        return None

    def _refused_as_static(self, operation: str) -> bool:
        if self._settings.static:
            logger.debug("Refusing %s on static node %r", operation, self)
            return True
        return False

    # ==================== Navigation ====================

    @property
    def root(self) -> TreeNode:
        """The topmost ancestor of this node."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def depth(self) -> int:
        """Depth of this node in the hierarchy (root=0)."""
        return 0 if self.parent is None else self.parent.depth + 1

    def walk(
        self, callback: Callable[[TreeNode], Any] | None = None
    ) -> Iterator[TreeNode] | None:
        """Walk this node and its descendants in pre-order.

        Args:
            callback: Optional function to call on each node.
                If provided, walk returns None.

        Yields:
            Nodes, starting with this one, if no callback provided.

        Example:
            >>> [node.value for node in tree.walk()]
            ['Master', 'Servant#1', 'Servant#2']
        """
        if callback is not None:
            for node in self._walk_gen():
                callback(node)
            return None
        return self._walk_gen()

    def _walk_gen(self) -> Iterator[TreeNode]:
        yield self
        for child in self._children or ():
            yield from child._walk_gen()

    # ==================== Conversion ====================

    def to_tree_model(self) -> TreeModel:
        """Describe this subtree as a TreeModel.

        Settings are the node-local overrides, not the merged ones, so the
        description re-inherits from wherever it is rebuilt. A loader that
        has not completed yet is kept.
        """
        return self._describe(clone=False)

    def _describe(self, clone: bool) -> TreeModel:
        value = self._value
        if clone and is_renamable(value):
            value = copy.copy(value)
        model: TreeModel = {
            'value': value,
            'settings': dict(self._local_settings),
            'children': (
                None if self._children is None
                else [child._describe(clone) for child in self._children]
            ),
        }
        if self.id is not None:
            model['id'] = self.id
        if (
            self._load_children is not None
            and self._loading_state is not ChildrenLoadingState.COMPLETED
        ):
            model['load_children'] = self._load_children
        return model


def _own_value(value: Any) -> Any:
    """Copy an opaque value so the node does not share it with its model.

    Renamable values and values that cannot be copied are kept by
    reference.
    """
    if is_renamable(value):
        return value
    try:
        return copy.deepcopy(value)
    except (TypeError, copy.Error):
        logger.debug("Keeping uncopyable %s value by reference", type(value).__name__)
        return value
