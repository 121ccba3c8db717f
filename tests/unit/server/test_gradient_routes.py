# tests/unit/server/test_gradient_routes.py
"""Tests for the gradient overlay endpoint and its cache."""

import base64

import numpy as np
import pytest
from fastapi.testclient import TestClient

from rewardarena.config import Regime, RegimeParams
from rewardarena.server import create_app
from rewardarena.server.gradient_cache import GradientCache


@pytest.fixture
def client():
    return TestClient(create_app(seed=0))


def _decode(data):
    raw = base64.b64decode(data["data"])
    return np.frombuffer(raw, dtype=np.uint8).reshape(data["height"], data["width"], 4)


def test_gradient_semantic(client):
    response = client.post("/api/gradient", json={"regime": "semantic"})
    assert response.status_code == 200
    data = response.json()
    assert data["encoding"] == "rgba8"
    pixels = _decode(data)
    assert pixels.shape == (300, 400, 4)
    assert tuple(pixels[150, 300]) == (0, 255, 155, 100)


def test_gradient_custom_goal(client):
    response = client.post(
        "/api/gradient",
        json={"regime": "sparse", "width": 40, "height": 30, "goal": {"x": 5, "y": 5}, "threshold": 3},
    )
    pixels = _decode(response.json())
    assert tuple(pixels[5, 5]) == (0, 255, 155, 100)
    assert tuple(pixels[29, 39]) == (0, 0, 100, 100)


def test_gradient_unknown_regime_is_blank(client):
    response = client.post("/api/gradient", json={"regime": "curiosity", "width": 20, "height": 10})
    assert response.status_code == 200
    assert not _decode(response.json()).any()


def test_gradient_rejects_oversized_canvas(client):
    response = client.post("/api/gradient", json={"regime": "semantic", "width": 10000})
    assert response.status_code == 422


class TestGradientCache:
    def test_hits_and_misses(self):
        cache = GradientCache(max_size=4)
        params = RegimeParams()
        a = cache.get_or_build(40, 30, (30.0, 15.0), Regime.SEMANTIC, params)
        b = cache.get_or_build(40, 30, (30.0, 15.0), Regime.SEMANTIC, params)
        assert a is b
        assert (cache.hits, cache.misses) == (1, 1)
        assert not a.flags.writeable

    def test_params_are_part_of_key(self):
        cache = GradientCache(max_size=4)
        cache.get_or_build(40, 30, (30.0, 15.0), Regime.SHAPING, RegimeParams(gamma=0.9))
        cache.get_or_build(40, 30, (30.0, 15.0), Regime.SHAPING, RegimeParams(gamma=0.5))
        assert cache.misses == 2
        assert len(cache) == 2

    def test_lru_eviction(self):
        cache = GradientCache(max_size=2)
        params = RegimeParams()
        for regime in (Regime.SPARSE, Regime.SHAPING, Regime.PROGRESS):
            cache.get_or_build(20, 10, (15.0, 5.0), regime, params)
        assert len(cache) == 2
        cache.get_or_build(20, 10, (15.0, 5.0), Regime.SPARSE, params)
        assert cache.misses == 4
