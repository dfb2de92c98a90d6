"""Tests for the number-theoretic transform and its table cache."""

import random

import numpy as np
import pytest

from field import FieldElement
from ntt import NumberTheoreticTransform, TransformCache

from helpers import MOD, random_coefficients

F17 = FieldElement.for_modulus(17)


def buffer(values):
    return np.array(values, dtype=object)


def naive_dft(values, field):
    mod = field.k_modulus
    n = len(values)
    w = pow(field.generator().val, (mod - 1) // n, mod)
    return [sum(v * pow(w, i * j, mod) for i, v in enumerate(values)) % mod for j in range(n)]


def test_forward_matches_naive_dft():
    rng = random.Random(1)
    engine = NumberTheoreticTransform(FieldElement)
    for n in (1, 2, 4, 8, 16):
        values = random_coefficients(rng, n)
        assert list(engine.forward(buffer(values))) == naive_dft(values, FieldElement)


def test_forward_is_in_place():
    engine = NumberTheoreticTransform(FieldElement)
    data = buffer([1, 2, 3, 4])
    out = engine.forward(data)
    assert out is data
    assert list(data) == naive_dft([1, 2, 3, 4], FieldElement)


def test_inverse_round_trip():
    rng = random.Random(2)
    engine = NumberTheoreticTransform(FieldElement)
    for n in (1, 2, 8, 64, 256):
        values = random_coefficients(rng, n)
        data = buffer(values)
        engine.forward(data)
        engine.inverse(data)
        assert list(data) == values


def test_pointwise_product_is_cyclic_convolution():
    engine = NumberTheoreticTransform(F17)
    a = buffer([1, 2, 0, 0])
    b = buffer([3, 4, 0, 0])
    engine.forward(a)
    engine.forward(b)
    c = a * b % 17
    engine.inverse(c)
    assert list(c) == [3, 10, 8, 0]


def test_empty_buffer():
    engine = NumberTheoreticTransform(FieldElement)
    data = buffer([])
    assert engine.forward(data) is data
    assert engine.inverse(data) is data
    assert engine.cache.rebuilds == 0


def test_length_must_be_power_of_two():
    engine = NumberTheoreticTransform(FieldElement)
    with pytest.raises(AssertionError):
        engine.forward(buffer([1, 2, 3]))


def test_length_bounded_by_two_adicity():
    engine = NumberTheoreticTransform(F17)
    engine.forward(buffer([1] * 16))
    with pytest.raises(AssertionError):
        engine.forward(buffer([1] * 32))


def test_cache_reused_on_exact_length():
    cache = TransformCache()
    engine = NumberTheoreticTransform(FieldElement, cache)
    engine.forward(buffer([0] * 8))
    engine.inverse(buffer([0] * 8))
    assert cache.rebuilds == 1
    assert cache.length == 8


def test_cache_rebuilt_on_any_length_change():
    cache = TransformCache()
    engine = NumberTheoreticTransform(FieldElement, cache)
    engine.forward(buffer([0] * 8))
    engine.forward(buffer([0] * 4))
    engine.forward(buffer([0] * 8))
    assert cache.rebuilds == 3
    assert list(cache.reversed_mask) == [0, 4, 2, 6, 1, 5, 3, 7]


def test_cache_roots_have_expected_order():
    cache = TransformCache()
    cache.tables(16, F17)
    assert len(cache.roots) == 4
    for level, root in enumerate(cache.roots):
        assert F17(root).is_order(2 << level)
        assert list(cache.twiddles[level]) == [pow(root, k, 17) for k in range(1 << level)]


def test_shared_engine_per_modulus():
    engine = NumberTheoreticTransform.shared(FieldElement)
    assert NumberTheoreticTransform.shared(FieldElement) is engine
    assert NumberTheoreticTransform.shared(F17) is not engine
    assert NumberTheoreticTransform(FieldElement).cache is not engine.cache


def test_values_stay_reduced():
    engine = NumberTheoreticTransform(FieldElement)
    data = buffer([MOD - 1] * 32)
    engine.forward(data)
    assert all(0 <= v < MOD for v in data)


def test_cache_shared_between_moduli():
    cache = TransformCache()
    NumberTheoreticTransform(FieldElement, cache).forward(buffer([1, 2, 0, 0]))
    data = NumberTheoreticTransform(F17, cache).forward(buffer([1, 2, 0, 0]))
    assert list(data) == naive_dft([1, 2, 0, 0], F17) == [3, 10, 16, 9]
    assert cache.modulus == 17
    assert cache.rebuilds == 2
