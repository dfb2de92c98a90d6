"""
In-place radix-2 number-theoretic transform over a prime field.

Thread-safety: a TransformCache is plain mutable state that is rewritten
whenever a new transform length or modulus is requested. The engine returned by
NumberTheoreticTransform.shared(field) is used by every polynomial over that
field. Concurrent transforms on one engine must be serialised by the caller,
or each thread must use its own engine built with a private TransformCache.
"""
import logging

import numpy as np

import utils

logger = logging.getLogger(__name__)


class TransformCache:
    """
    Bit-reversal permutation and root-of-unity tables for one transform length
    over one modulus. Tables are rebuilt from scratch whenever a different
    length or modulus is requested.
    """

    def __init__(self):
        self.length = 0
        self.modulus = None
        self.reversed_mask = None
        # roots[level] is a primitive 2**(level + 1)-th root of unity,
        # twiddles[level] holds its powers 0 .. 2**level - 1.
        self.roots = []
        self.twiddles = []
        self.rebuilds = 0

    def tables(self, length, field):
        if length != self.length or field.k_modulus != self.modulus:
            self._rebuild(length, field)
        return self.reversed_mask, self.twiddles

    def _rebuild(self, length, field):
        mod = field.k_modulus
        lg = length.bit_length() - 1
        g = field.generator().val
        self.reversed_mask = utils.bit_reverse_permutation(length)
        self.roots = [pow(g, (mod - 1) // (2 << level), mod) for level in range(lg)]
        self.twiddles = []
        for level, root in enumerate(self.roots):
            powers = np.empty(1 << level, dtype=object)
            current = 1
            for k in range(1 << level):
                powers[k] = current
                current = current * root % mod
            self.twiddles.append(powers)
        self.length = length
        self.modulus = mod
        self.rebuilds += 1
        logger.debug('rebuilt transform tables for length %d over F_%d (rebuild #%d)',
                     length, mod, self.rebuilds)


class NumberTheoreticTransform:
    """Forward and inverse NTT for buffers of reduced ints in one field."""

    _shared = {}

    def __init__(self, field, cache=None):
        self.field = field
        self.cache = cache if cache is not None else TransformCache()

    @classmethod
    def shared(cls, field):
        """The process-wide engine for `field`; one cache per modulus."""
        if field.k_modulus not in cls._shared:
            cls._shared[field.k_modulus] = cls(field)
        return cls._shared[field.k_modulus]

    def forward(self, buffer):
        """
        Decimation-in-time transform of `buffer` in place.
        `buffer` must be a numpy object array whose length is a power of two.
        """
        n = len(buffer)
        if n == 0:
            return buffer
        assert utils.is_power_of_two(n), f'Transform length {n} is not a power of two.'
        assert n.bit_length() - 1 <= self.field.two_adicity(), \
            f'Transform length {n} is too long for F_{self.field.k_modulus}.'
        mod = self.field.k_modulus
        reversed_mask, twiddles = self.cache.tables(n, self.field)
        buffer[:] = buffer[reversed_mask]
        for level, powers in enumerate(twiddles):
            half = 1 << level
            # Each row is one block of 2 * half: low half a, high half b.
            blocks = buffer.reshape(-1, 2, half)
            low = blocks[:, 0, :]
            high = blocks[:, 1, :] * powers % mod
            blocks[:, 1, :] = (low - high) % mod
            blocks[:, 0, :] = (low + high) % mod
        return buffer

    def inverse(self, buffer):
        """Inverse transform: forward pass, reverse entries 1..n-1, scale by 1/n."""
        n = len(buffer)
        if n == 0:
            return buffer
        self.forward(buffer)
        buffer[1:] = buffer[:0:-1].copy()
        inv_n = self.field(n).inverse().val
        buffer[:] = buffer * inv_n % self.field.k_modulus
        return buffer
