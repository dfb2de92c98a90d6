"""Shared helpers: seeded random polynomials and a schoolbook reference product."""

from field import FieldElement
from polynomial import Polynomial

MOD = FieldElement.k_modulus


def inverse(x, mod=MOD):
    return pow(x, mod - 2, mod)


def random_coefficients(rng, n, mod=MOD):
    return [rng.randrange(mod) for _ in range(n)]


def random_polynomial(rng, n, cls=Polynomial):
    return cls(random_coefficients(rng, n, cls.field.k_modulus))


def naive_product(a, b, mod=MOD):
    if not a or not b:
        return []
    out = [0] * (len(a) + len(b) - 1)
    for i, x in enumerate(a):
        for j, y in enumerate(b):
            out[i + j] = (out[i + j] + x * y) % mod
    return out


def unit_series(n):
    return [1] + [0] * (n - 1)
