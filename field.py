import logging
from numbers import Integral
from random import randint

import utils

logger = logging.getLogger(__name__)


class FieldElement:
    """
    Represents an element of F_p for one fixed prime p.

    The modulus lives on the class, so each prime gets its own subclass
    (see for_modulus). The default class is F_998244353 with generator 3,
    whose multiplicative group has order 119 * 2**23.
    """
    k_modulus = 998244353
    generator_val = 3

    _fields = {}

    def __init__(self, val):
        # Force conversion to Python int so numpy integers never overflow
        self.val = int(val) % self.k_modulus

    @classmethod
    def for_modulus(cls, modulus, generator=None):
        """
        Returns the FieldElement subclass bound to `modulus`.
        Subclasses are cached, so the same arguments give the same class.
        """
        key = (modulus, generator)
        if key not in FieldElement._fields:
            assert modulus > 2 and pow(2, modulus, modulus) == 2, f'{modulus} is not prime.'
            field = type(f'FieldElement_{modulus}', (FieldElement,),
                         {'k_modulus': modulus, 'generator_val': generator})
            FieldElement._fields[key] = field
        return FieldElement._fields[key]

    @classmethod
    def zero(cls):
        return cls(0)

    @classmethod
    def one(cls):
        return cls(1)

    def __repr__(self):
        return repr((self.val + self.k_modulus//2) % self.k_modulus - self.k_modulus//2)

    def __str__(self):
        return str(self.val)

    def __int__(self):
        return self.val

    def __bool__(self):
        return self.val != 0

    def __eq__(self, other):
        if isinstance(other, Integral):
            return self.val == int(other) % self.k_modulus
        return isinstance(other, FieldElement) and self.k_modulus == other.k_modulus and self.val == other.val

    def __hash__(self):
        return hash(self.val)

    @classmethod
    def generator(cls):
        """Primitive root of the multiplicative group, found on first use if unknown."""
        if cls.generator_val is None:
            cls.generator_val = utils.find_primitive_root(cls.k_modulus)
            logger.debug('primitive root of F_%d is %d', cls.k_modulus, cls.generator_val)
        return cls(cls.generator_val)

    primitive_root = generator

    @classmethod
    def two_adicity(cls):
        """Largest L such that 2**L divides p - 1, i.e. the longest transform the field supports."""
        return utils.two_adicity(cls.k_modulus - 1)

    @classmethod
    def typecast(cls, other):
        # Accept numpy integer types as well as Python ints
        if hasattr(other, 'dtype') or isinstance(other, Integral):
            return cls(int(other))
        assert isinstance(other, FieldElement), f'Type mismatch: FieldElement and {type(other)}.'
        assert other.k_modulus == cls.k_modulus, \
            f'Field mismatch: F_{cls.k_modulus} and F_{other.k_modulus}.'
        return other

    def __neg__(self):
        return type(self)(-self.val)

    def __add__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return type(self)(self.val + other.val)

    __radd__ = __add__

    def __sub__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return type(self)(self.val - other.val)

    def __rsub__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return other - self

    def __mul__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return type(self)(self.val * other.val)

    __rmul__ = __mul__

    def __truediv__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return self * other.inverse()

    def __rtruediv__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return other * self.inverse()

    def __pow__(self, n):
        if n < 0:
            return self.inverse() ** -n
        cur_pow = self
        res = type(self)(1)
        while n > 0:
            if n % 2 != 0:
                res *= cur_pow
            n = n // 2
            cur_pow *= cur_pow
        return res

    def inverse(self):
        t, new_t = 0, 1
        r, new_r = self.k_modulus, self.val
        while new_r != 0:
            quotient = r // new_r
            t, new_t = new_t, (t - (quotient * new_t))
            r, new_r = new_r, r - quotient * new_r
        assert r == 1, f'{self.val} is not invertible modulo {self.k_modulus}.'
        return type(self)(t)

    def is_order(self, n):
        assert n >= 1
        h = type(self)(1)
        for _ in range(1, n):
            h *= self
            if h == 1:
                return False
        return h * self == 1

    @classmethod
    def random_element(cls, exclude_elements=[]):
        fe = cls(randint(0, cls.k_modulus - 1))
        while fe in exclude_elements:
            fe = cls(randint(0, cls.k_modulus - 1))
        return fe
