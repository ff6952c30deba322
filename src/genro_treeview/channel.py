# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""One-shot notification channel for asynchronously loaded children.

A ChildrenChannel fires at most once. Subscribers that attach before it
fires wait in a queue; subscribers that attach afterwards receive the
cached value immediately. Either way each subscription is called exactly
once, with the same object.

The first subscription calls the channel's demand hook, which is how a
node starts loading its children lazily.

Example:
    >>> channel = ChildrenChannel()
    >>> received = []
    >>> channel.subscribe(received.append)
    >>> channel.resolve(['a', 'b'])
    >>> channel.subscribe(received.append)
    >>> received
    [['a', 'b'], ['a', 'b']]
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[[Any], Any]


class ChildrenChannel:
    """Replaying single-value broadcast.

    Attributes:
        resolved: True once resolve() has been called.
        value: The resolved value, or None while pending.
    """

    __slots__ = ('_on_demand', '_demanded', '_subscribers', '_resolved', '_value')

    def __init__(self, on_demand: Callable[[], Any] | None = None) -> None:
        """Initialize a pending channel.

        Args:
            on_demand: Called once, on the first subscription, if the
                channel is still pending at that point.
        """
        self._on_demand = on_demand
        self._demanded = False
        self._subscribers: list[SubscriberCallback] = []
        self._resolved = False
        self._value: Any = None

    def __repr__(self) -> str:
        state = 'resolved' if self._resolved else f'pending({len(self._subscribers)})'
        return f"ChildrenChannel({state})"

    @property
    def resolved(self) -> bool:
        return self._resolved

    @property
    def value(self) -> Any:
        return self._value

    def subscribe(self, callback: SubscriberCallback) -> None:
        """Register callback to receive the value once.

        If the channel already fired, callback runs before subscribe
        returns.
        """
        if self._resolved:
            callback(self._value)
            return
        self._subscribers.append(callback)
        self.demand()

    def demand(self) -> None:
        """Call the demand hook unless it already ran or the value is known."""
        if self._demanded or self._resolved:
            return
        self._demanded = True
        if self._on_demand is not None:
            self._on_demand()

    @classmethod
    def of(cls, value: Any) -> ChildrenChannel:
        """Return a channel already resolved with value."""
        channel = cls()
        channel.resolve(value)
        return channel

    def resolve(self, value: Any) -> None:
        """Publish value to every pending and future subscriber.

        Only the first call has an effect. Every pending subscriber is
        called even if an earlier one raises; the first error is re-raised
        once all of them have run.

        Raises:
            Exception: The first exception raised by a subscriber.
        """
        if self._resolved:
            logger.warning("%r resolved more than once, ignoring new value", self)
            return
        self._resolved = True
        self._value = value
        subscribers, self._subscribers = self._subscribers, []
        first_error: Exception | None = None
        for callback in subscribers:
            try:
                callback(value)
            except Exception as error:
                logger.exception("Subscriber %r of %r failed", callback, self)
                if first_error is None:
                    first_error = error
        if first_error is not None:
            raise first_error

    async def wait(self) -> Any:
        """Wait for the value from a running asyncio loop.

        Example:
            >>> children = await node.children_async.wait()
        """
        if self._resolved:
            return self._value
        future = asyncio.get_running_loop().create_future()

        def _deliver(value: Any) -> None:
            if not future.done():
                future.set_result(value)

        self.subscribe(_deliver)
        return await future
