"""Tests for the bounded linear retry schedule."""

import pytest

from klipper_discovery.reconnect import ReconnectPolicy


@pytest.mark.parametrize("k", [1, 2, 3, 4, 5])
def test_delay_is_linear(k):
    assert ReconnectPolicy().delay_for(k) == 1.0 * k


def test_schedule_until_exhausted():
    policy = ReconnectPolicy()
    delays = []
    delay = policy.next_delay()
    while delay is not None:
        delays.append(delay)
        delay = policy.next_delay()

    assert delays == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert policy.attempts == 5
    assert policy.exhausted
    assert policy.next_delay() is None
    assert policy.attempts == 5


def test_reset():
    policy = ReconnectPolicy(max_attempts=2, base_delay=0.5)
    assert policy.next_delay() == 0.5
    assert policy.next_delay() == 1.0
    assert policy.exhausted

    policy.reset()
    assert policy.attempts == 0
    assert not policy.exhausted
    assert policy.next_delay() == 0.5
