"""Shared test fixtures.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import pytest


class FakeRedis:
    """Just enough of redis.Redis for the backend."""

    def __init__(self):
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value
        return True

    def exists(self, key):
        return int(key in self.data)


@pytest.fixture
def redis_client():
    return FakeRedis()
