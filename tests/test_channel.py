# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for ChildrenChannel."""

import asyncio

import pytest

from genro_treeview import ChildrenChannel


class TestChildrenChannel:
    """Tests for the one-shot replaying channel."""

    def test_pending_by_default(self):
        """Test a new channel has no value."""
        channel = ChildrenChannel()
        assert channel.resolved is False
        assert channel.value is None
        assert repr(channel) == 'ChildrenChannel(pending(0))'

    def test_early_and_late_subscribers(self):
        """Test every subscriber gets the same value exactly once."""
        channel = ChildrenChannel()
        received = []
        channel.subscribe(received.append)
        channel.subscribe(received.append)
        assert received == []

        value = ['a', 'b']
        channel.resolve(value)
        channel.subscribe(received.append)

        assert len(received) == 3
        assert all(item is value for item in received)
        assert repr(channel) == 'ChildrenChannel(resolved)'

    def test_resolve_only_once(self):
        """Test later resolutions are ignored."""
        channel = ChildrenChannel()
        received = []
        channel.subscribe(received.append)
        channel.resolve('first')
        channel.resolve('second')
        channel.subscribe(received.append)
        assert received == ['first', 'first']
        assert channel.value == 'first'

    def test_every_subscriber_runs_when_one_raises(self):
        """Test a failing subscriber does not stop delivery to the others."""
        channel = ChildrenChannel()
        received = []

        def broken(value):
            raise ValueError('first failure')

        def also_broken(value):
            raise KeyError('second failure')

        channel.subscribe(received.append)
        channel.subscribe(broken)
        channel.subscribe(also_broken)
        channel.subscribe(received.append)
        with pytest.raises(ValueError, match='first failure'):
            channel.resolve('value')
        assert received == ['value', 'value']
        assert channel.resolved is True

    def test_of_is_resolved(self):
        """Test ChildrenChannel.of builds an already resolved channel."""
        channel = ChildrenChannel.of(['a'])
        received = []
        channel.subscribe(received.append)
        assert channel.resolved is True
        assert received == [['a']]

    def test_demand_hook_runs_once(self):
        """Test the hook runs on the first subscription only."""
        demands = []
        channel = ChildrenChannel(on_demand=lambda: demands.append(1))
        channel.subscribe(lambda value: None)
        channel.subscribe(lambda value: None)
        channel.demand()
        assert demands == [1]

    def test_demand_hook_skipped_when_resolved(self):
        """Test subscribing to a resolved channel does not call the hook."""
        demands = []
        channel = ChildrenChannel(on_demand=lambda: demands.append(1))
        channel.resolve([])
        channel.subscribe(lambda value: None)
        assert demands == []

    def test_hook_may_resolve_synchronously(self):
        """Test a hook resolving at once still reaches the first subscriber."""
        holder = {}
        channel = ChildrenChannel(on_demand=lambda: holder['channel'].resolve('now'))
        holder['channel'] = channel
        received = []
        channel.subscribe(received.append)
        assert received == ['now']

    def test_wait(self):
        """Test wait() before and after resolution."""

        async def scenario():
            channel = ChildrenChannel()
            asyncio.get_running_loop().call_soon(channel.resolve, 'later')
            first = await channel.wait()
            second = await channel.wait()
            return first, second

        assert asyncio.run(scenario()) == ('later', 'later')
