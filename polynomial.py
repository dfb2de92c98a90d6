import logging
from numbers import Integral

import numpy as np
from tqdm import tqdm

import utils
from field import FieldElement
from ntt import NumberTheoreticTransform

logger = logging.getLogger(__name__)

_CUTOFFS = ('MUL_MIN_CUT', 'MUL_MAX_CUT', 'DIV_N_CUT', 'DIV_M_CUT', 'INV_BRUTE_FORCE')


def _zeros(n):
    # dtype=object keeps Python ints, so products of reduced values never overflow
    return np.zeros(n, dtype=object)


class Polynomial:
    """
    Represents a dense polynomial over a prime field; coeffs[i] is the coefficient of x^i.

    Coefficients are stored as reduced Python ints in a numpy object array.
    Trailing zeros are allowed and only removed by normalize().
    Binary operators come in a pure form (p + q) and an in-place form (p += q).
    """
    field = FieldElement
    transform = NumberTheoreticTransform.shared(FieldElement)

    # Naive product when min(len) <= MUL_MIN_CUT or max(len) <= MUL_MAX_CUT
    MUL_MIN_CUT = 20
    MUL_MAX_CUT = 64
    # Long division when n <= DIV_N_CUT or m <= DIV_M_CUT
    DIV_N_CUT = 128
    DIV_M_CUT = 64
    # Coefficients of a series inverse computed directly before Newton steps
    INV_BRUTE_FORCE = 128

    _bound = {}

    @classmethod
    def over(cls, field, transform=None, **cutoffs):
        """
        Returns a Polynomial subclass over `field`.

        `transform` replaces the shared transform engine of the field, e.g. one
        with a private cache per thread. Keyword cutoffs (mul_min_cut,
        mul_max_cut, div_n_cut, div_m_cut, inv_brute_force) override the
        class defaults. Plain calls are cached per field.
        """
        overrides = {name.upper(): value for name, value in cutoffs.items()}
        for name in overrides:
            assert name in _CUTOFFS, f'Unknown cutoff {name.lower()}.'
        key = (cls, field)
        plain = transform is None and not overrides
        if plain and key in Polynomial._bound:
            return Polynomial._bound[key]
        if transform is None:
            transform = NumberTheoreticTransform.shared(field)
        namespace = {'field': field, 'transform': transform, **overrides}
        bound = type(f'{cls.__name__}_{field.k_modulus}', (cls,), namespace)
        if plain:
            Polynomial._bound[key] = bound
        return bound

    @classmethod
    def X(cls):
        return cls([0, 1])

    def __init__(self, coefficients=(), var='x'):
        if isinstance(coefficients, Polynomial):
            assert coefficients.field.k_modulus == self.field.k_modulus, \
                f'Field mismatch: F_{self.field.k_modulus} and F_{coefficients.field.k_modulus}.'
            self.coeffs = coefficients.coeffs.copy()
        else:
            data = [self.field.typecast(c).val for c in coefficients]
            self.coeffs = np.array(data, dtype=object)
        self.var = var

    @classmethod
    def _wrap(cls, coeffs, var='x'):
        # Takes ownership of an already reduced object array
        poly = cls.__new__(cls)
        poly.coeffs = coeffs
        poly.var = var
        return poly

    @classmethod
    def zeros(cls, n):
        return cls._wrap(_zeros(n))

    @classmethod
    def monomial(cls, degree, coefficient):
        coeffs = _zeros(degree + 1)
        coeffs[-1] = cls.field.typecast(coefficient).val
        return cls._wrap(coeffs)

    @classmethod
    def random(cls, length):
        return cls([cls.field.random_element() for _ in range(length)])

    def copy(self):
        return self._wrap(self.coeffs.copy(), self.var)

    @property
    def elements(self):
        return [self.field(c) for c in self.coeffs]

    def __len__(self):
        return len(self.coeffs)

    def __iter__(self):
        return (self.field(c) for c in self.coeffs)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self._wrap(self.coeffs[index].copy(), self.var)
        return self.field(self.coeffs[index])

    def __setitem__(self, index, value):
        self.coeffs[index] = self.field.typecast(value).val

    def __str__(self):
        return ' '.join(str(c) for c in self.coeffs)

    def __repr__(self):
        return f'Polynomial({[int(c) for c in self.coeffs]})'

    def _repr_latex_(self):
        mod = self.field.k_modulus
        if self.degree() == -1:
            return '$0$'
        res = ['$']
        first = True
        for exponent, coef in enumerate(self.coeffs):
            if coef == 0:
                continue
            # Centred representative, so p - 1 renders as -1
            coef = coef if coef <= mod // 2 else coef - mod
            monomial = utils.latex_monomial(exponent, coef, self.var)
            if first:
                first = False
                res.append(monomial)
                continue
            oper = '+'
            if monomial[0] == '-':
                oper = '-'
                monomial = monomial[1:]
            res.append(oper)
            res.append(monomial)
        res.append('$')
        return ' '.join(res)

    def __eq__(self, other):
        if isinstance(other, (list, tuple)):
            try:
                other = type(self)(other)
            except AssertionError:
                return NotImplemented
        elif not isinstance(other, Polynomial) or other.field.k_modulus != self.field.k_modulus:
            return NotImplemented
        return np.array_equal(self.coeffs, other.coeffs)

    def typecast(self, other):
        if isinstance(other, Polynomial):
            assert other.field.k_modulus == self.field.k_modulus, \
                f'Field mismatch: F_{self.field.k_modulus} and F_{other.field.k_modulus}.'
            return other
        if isinstance(other, (Integral, FieldElement)):
            return type(self)([other])
        if isinstance(other, (list, tuple, np.ndarray)):
            return type(self)(other)
        assert False, f'Type mismatch: Polynomial and {type(other)}.'

    # Structure

    def resize(self, n):
        """Pads with zeros or truncates to exactly n coefficients. Returns self."""
        assert n >= 0, f'Cannot resize to {n} coefficients.'
        size = len(self.coeffs)
        if n <= size:
            self.coeffs = self.coeffs[:n].copy()
        else:
            self.coeffs = np.concatenate([self.coeffs, _zeros(n - size)])
        return self

    def normalize(self):
        """Drops trailing zero coefficients. Returns self."""
        self.coeffs = np.trim_zeros(self.coeffs, 'b').copy()
        return self

    def degree(self):
        nonzero = np.flatnonzero(self.coeffs)
        return int(nonzero[-1]) if nonzero.size else -1

    def eval(self, point):
        mod = self.field.k_modulus
        point_val = self.field.typecast(point).val
        val = 0
        for c in self.coeffs[::-1]:
            val = (val * point_val + c) % mod
        return self.field(val)

    def __call__(self, other):
        if isinstance(other, (Integral, FieldElement)):
            return self.eval(other)
        raise NotImplementedError()

    # Arithmetic

    def __neg__(self):
        return self._wrap((0 - self.coeffs) % self.field.k_modulus, self.var)

    def __iadd__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        if len(self) < len(other):
            self.resize(len(other))
        n = len(other)
        self.coeffs[:n] = (self.coeffs[:n] + other.coeffs) % self.field.k_modulus
        return self

    def __isub__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        if len(self) < len(other):
            self.resize(len(other))
        n = len(other)
        self.coeffs[:n] = (self.coeffs[:n] - other.coeffs) % self.field.k_modulus
        return self

    def __add__(self, other):
        return self.copy().__iadd__(other)

    __radd__ = __add__

    def __sub__(self, other):
        return self.copy().__isub__(other)

    def __rsub__(self, other):
        return (-self).__iadd__(other)

    def _scale(self, value):
        self.coeffs = self.coeffs * value % self.field.k_modulus
        return self

    def scalar_mul(self, scalar):
        return self.copy()._scale(self.field.typecast(scalar).val)

    def __imul__(self, other):
        if isinstance(other, (Integral, FieldElement)):
            try:
                scalar = self.field.typecast(other)
            except AssertionError:
                return NotImplemented
            return self._scale(scalar.val)
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        self.coeffs = self._multiply(self.coeffs, other.coeffs)
        return self

    def __mul__(self, other):
        return self.copy().__imul__(other)

    __rmul__ = __mul__

    @classmethod
    def _multiply(cls, a, b):
        """Exact product of two coefficient arrays; no normalization."""
        if a.size == 0 or b.size == 0:
            return _zeros(0)
        mod = cls.field.k_modulus
        if min(a.size, b.size) <= cls.MUL_MIN_CUT or max(a.size, b.size) <= cls.MUL_MAX_CUT:
            return np.convolve(a, b) % mod

        real_size = a.size + b.size - 1
        n = utils.next_power_of_two(real_size)
        logger.debug('NTT product of sizes %d and %d with length %d', a.size, b.size, n)
        fa = _zeros(n)
        fa[:a.size] = a
        fb = _zeros(n)
        fb[:b.size] = b
        cls.transform.forward(fa)
        cls.transform.forward(fb)
        fa[:] = fa * fb % mod
        cls.transform.inverse(fa)
        return fa[:real_size].copy()

    def _quotient(self, other):
        dividend = self.copy().normalize()
        divisor = other.copy().normalize()
        assert len(divisor) > 0, 'Dividing by zero polynomial.'
        n, m = len(dividend), len(divisor)
        if n < m:
            return type(self)()

        mod = self.field.k_modulus
        size = n - m + 1
        if n <= self.DIV_N_CUT or m <= self.DIV_M_CUT:
            a, b = dividend.coeffs, divisor.coeffs
            inv = self.field(b[-1]).inverse().val
            quotient = _zeros(size)
            for i in range(size - 1, -1, -1):
                q = a[i + m - 1] * inv % mod
                quotient[i] = q
                if q != 0:
                    a[i:i + m] = (a[i:i + m] - b * q) % mod
            return self._wrap(quotient).normalize()

        # Reversal turns division by the leading term into a series inverse
        logger.debug('Newton division of sizes %d and %d', n, m)
        reversed_dividend = self._wrap(dividend.coeffs[::-1][:size].copy())
        reversed_divisor = self._wrap(divisor.coeffs[::-1].copy())
        quotient = (reversed_dividend * reversed_divisor.inv(size)).resize(size)
        quotient.coeffs = quotient.coeffs[::-1].copy()
        return quotient.normalize()

    def qdiv(self, other):
        """Returns (quotient, remainder) with deg(remainder) < deg(other)."""
        other = self.typecast(other)
        quotient = self._quotient(other)
        remainder = self - quotient * other
        return quotient, remainder.normalize()

    def __divmod__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return self.qdiv(other)

    def __ifloordiv__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        self.coeffs = self._quotient(other).coeffs
        return self

    def __floordiv__(self, other):
        return self.copy().__ifloordiv__(other)

    def __imod__(self, other):
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        self -= self._quotient(other) * other
        return self.normalize()

    def __mod__(self, other):
        return self.copy().__imod__(other)

    def __itruediv__(self, other):
        if isinstance(other, (Integral, FieldElement)):
            try:
                scalar = self.field.typecast(other)
            except AssertionError:
                return NotImplemented
            return self._scale(scalar.inverse().val)
        try:
            other = self.typecast(other)
        except AssertionError:
            return NotImplemented
        return self.__ifloordiv__(other)

    def __truediv__(self, other):
        return self.copy().__itruediv__(other)

    # Calculus and power series

    def derivative(self):
        n = len(self)
        if n <= 1:
            return self._wrap(_zeros(0), self.var)
        factors = np.array(list(range(1, n)), dtype=object)
        return self._wrap(self.coeffs[1:] * factors % self.field.k_modulus, self.var)

    def integral(self, constant=0):
        """Antiderivative with the given constant term; one coefficient longer than self."""
        n = len(self)
        result = _zeros(n + 1)
        result[0] = self.field.typecast(constant).val
        if n:
            inverses = np.array([self.field(i).inverse().val for i in range(1, n + 1)], dtype=object)
            result[1:] = self.coeffs * inverses % self.field.k_modulus
        return self._wrap(result, self.var)

    def inv(self, degree, progress=False):
        """
        Returns q with self * q = 1 mod x^degree.

        The first INV_BRUTE_FORCE coefficients are solved one at a time, keeping
        a running partial product so each step is a single vector update. Newton
        steps q <- q * (2 - p * q) then double the precision until it reaches
        `degree`.
        """
        mod = self.field.k_modulus
        assert degree >= 0, f'Cannot invert to {degree} coefficients.'
        assert len(self) > 0 and self.coeffs[0] != 0, 'Polynomial is not invertible.'
        brute = min(degree, max(1, self.INV_BRUTE_FORCE))
        seed = _zeros(brute)
        have = _zeros(brute)
        start_inv = self.field(self.coeffs[0]).inverse().val
        for i in range(brute):
            seed[i] = ((1 if i == 0 else 0) - have[i]) * start_inv % mod
            steps = min(len(self), brute - i)
            have[i:i + steps] = (have[i:i + steps] + seed[i] * self.coeffs[:steps]) % mod

        result = self._wrap(seed)
        for power in tqdm(utils.doubling_schedule(max(brute, 1), degree), desc='inv', disable=not progress):
            head = self._wrap(self.coeffs[:2 * power].copy())
            correction = -(head * result).resize(2 * power)
            correction.coeffs[0] = (correction.coeffs[0] + 2) % mod
            result *= correction
            result.resize(min(degree, 2 * power))
        return result.resize(degree)

    def log(self, degree):
        """Returns log(self) mod x^degree as the integral of p'/p."""
        assert degree >= 0, f'Cannot take log to {degree} coefficients.'
        assert len(self) > 0 and self.coeffs[0] == 1, 'Logarithm is not defined.'
        quotient = self.derivative().resize(degree) * self.inv(degree)
        return quotient.resize(degree).integral(0).resize(degree)

    def exp(self, degree, progress=False):
        """
        Returns exp(self) mod x^degree.
        Newton steps e <- e * (1 - log(e) + p), each doubling the precision.
        """
        mod = self.field.k_modulus
        assert degree >= 0, f'Cannot take exp to {degree} coefficients.'
        assert len(self) > 0 and self.coeffs[0] == 0, 'Exponential is not defined.'
        result = type(self)([1])
        for power in tqdm(utils.doubling_schedule(1, degree), desc='exp', disable=not progress):
            step = self._wrap(self.coeffs[:2 * power].copy()) - result.log(2 * power)
            step.coeffs[0] = (step.coeffs[0] + 1) % mod
            result *= step
            result.resize(min(degree, 2 * power))
        return result.resize(degree)
