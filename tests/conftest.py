"""Shared fixtures and random sources for the generator tests."""

import random

import pytest


class ScriptedRandomSource:
    """Replays fixed draws; each method pulls from its own queue."""

    def __init__(self, uniforms=(), ints=(), probs=()):
        self.uniforms = list(uniforms)
        self.ints = list(ints)
        self.probs = list(probs)

    def uniform(self, low, high):
        return self.uniforms.pop(0)

    def randint(self, low, high):
        return self.ints.pop(0)

    def random(self):
        return self.probs.pop(0)


class CountingRandomSource:
    """random.Random wrapper that counts every draw."""

    def __init__(self, seed):
        self._rng = random.Random(seed)
        self.calls = 0

    def uniform(self, low, high):
        self.calls += 1
        return self._rng.uniform(low, high)

    def randint(self, low, high):
        self.calls += 1
        return self._rng.randint(low, high)

    def random(self):
        self.calls += 1
        return self._rng.random()


@pytest.fixture
def scripted():
    return ScriptedRandomSource


@pytest.fixture
def counting():
    return CountingRandomSource
