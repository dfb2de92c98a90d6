import numpy as np

# Source - https://stackoverflow.com/a/3035188
# Posted by Robert William Hanks, modified by community. See post 'Timeline' for change history
# Retrieved 2026-02-02, License - CC BY-SA 4.0

def primes(n):
    """ Returns  a list of primes < n """
    if n <= 2:
        return []
    sieve = [True] * n
    for i in range(3,int(n**0.5)+1,2):
        if sieve[i]:
            sieve[i*i::2*i]=[False]*((n-i*i-1)//(2*i)+1)
    return [2] + [i for i in range(3,n,2) if sieve[i]]

# ===================================================


def two_adicity(n):
    """Largest k such that 2**k divides n (n > 0)."""
    assert n > 0
    return (n & -n).bit_length() - 1


def prime_factors(n):
    """
    Distinct prime factors of n in increasing order.
    Powers of two are stripped first, so only the odd part is trial divided.
    """
    assert n >= 1
    factors = []
    if n % 2 == 0:
        factors.append(2)
        n >>= two_adicity(n)
    for p in primes(int(n**0.5) + 2):
        if p * p > n:
            break
        if n % p == 0:
            factors.append(p)
            while n % p == 0:
                n //= p
    if n > 1 and n not in factors:
        factors.append(n)
    return factors


def find_primitive_root(p):
    """Smallest generator of the multiplicative group of F_p."""
    if p == 2:
        return 1
    phi = p - 1
    factors = prime_factors(phi)
    for g in range(2, p):
        if all(pow(g, phi // q, p) != 1 for q in factors):
            return g
    assert False, f'No primitive root modulo {p}.'


def is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def next_power_of_two(n):
    return 1 if n <= 1 else 1 << (n - 1).bit_length()


def bit_reverse_permutation(n):
    """
    Index table r with r[i] = i with its log2(n) low bits reversed.
    Built with the recurrence r[i] = (r[i >> 1] >> 1) | ((i & 1) << (lg - 1)).
    """
    assert is_power_of_two(n), f'{n} is not a power of two.'
    lg = n.bit_length() - 1
    reversed_mask = np.zeros(n, dtype=np.int64)
    for mask in range(1, n):
        reversed_mask[mask] = (reversed_mask[mask >> 1] >> 1) | ((mask & 1) << (lg - 1))
    return reversed_mask


def doubling_schedule(start, limit):
    """Precisions start, 2*start, 4*start, ... strictly below limit."""
    assert start >= 1
    schedule = []
    power = start
    while power < limit:
        schedule.append(power)
        power <<= 1
    return schedule


def latex_monomial(exponent, coef, var):
    if exponent == 0:
        return str(coef)
    if coef == 1:
        coef = ''
    if coef == -1:
        coef = '-'
    if exponent == 1:
        return f'{coef}{var}'
    return f'{coef}{var}^{{{exponent}}}'
