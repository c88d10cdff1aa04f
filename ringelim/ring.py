"""Commutative rings consumed by the elimination engine.

The engine never calls operators on coefficients directly. Every sum,
product and division goes through a ring object, so coefficients can be
plain ``int``, ``fractions.Fraction``, residues modulo ``N`` or
``sympy.Poly`` instances.

Euclidean rings additionally provide ``divmod``, ``euclidean_degree`` and
``gcdex``; these drive every normal form computation.
"""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from operator import index
from typing import Any, Optional, Tuple

import sympy

from .exceptions import ContractViolationError, UnsupportedRingError


class Ring:
    """Base ring contract.

    Subclasses supply ``zero``, ``one``, arithmetic and ``inverse``.
    Euclidean subclasses set ``is_euclidean`` and implement ``divmod``,
    ``euclidean_degree`` and ``normalizing_unit``.
    """

    is_euclidean = False
    is_field = False

    @property
    def zero(self) -> Any:
        raise NotImplementedError

    @property
    def one(self) -> Any:
        raise NotImplementedError

    def coerce(self, x: Any) -> Any:
        raise NotImplementedError

    def add(self, a, b):
        return a + b

    def sub(self, a, b):
        return a - b

    def neg(self, a):
        return -a

    def mul(self, a, b):
        return a * b

    def is_zero(self, a) -> bool:
        return a == self.zero

    def inverse(self, a) -> Optional[Any]:
        raise NotImplementedError

    def is_unit(self, a) -> bool:
        return self.inverse(a) is not None

    def divmod(self, a, b) -> Tuple[Any, Any]:
        raise UnsupportedRingError(f"{self} is not a Euclidean ring")

    def euclidean_degree(self, a) -> int:
        raise UnsupportedRingError(f"{self} is not a Euclidean ring")

    def normalizing_unit(self, a):
        raise UnsupportedRingError(f"{self} is not a Euclidean ring")

    def elimination_weight(self, a) -> int:
        """Pivot-quality heuristic: the euclidean degree, 0 where there is none."""
        return self.euclidean_degree(a) if self.is_euclidean else 0

    def is_normalized(self, a) -> bool:
        return self.normalizing_unit(a) == self.one

    def divides(self, a, b) -> bool:
        """True if ``a`` divides ``b``."""
        if self.is_zero(a):
            return self.is_zero(b)
        _, r = self.divmod(b, a)
        return self.is_zero(r)

    def exact_div(self, a, b):
        """Return ``a / b``, which must be exact."""
        q, r = self.divmod(a, b)
        if not self.is_zero(r):
            raise ContractViolationError(f"{b} does not divide {a} in {self}")
        return q

    def gcdex(self, a, b):
        """
        Extended gcd in unimodular matrix form.

        Returns g, s, t, u, v such that:
        [[s, t], [u, v]] * [a, b]^T = [g, 0]^T
        and sv - tu is a unit.
        If b is divisible by a, s=v=1 and t=0.
        """
        if self.is_zero(a) and self.is_zero(b):
            return self.zero, self.one, self.zero, self.zero, self.one

        if not self.is_zero(a) and self.divides(a, b):
            return a, self.one, self.zero, self.neg(self.exact_div(b, a)), self.one

        r0, r1 = a, b
        s0, s1 = self.one, self.zero
        t0, t1 = self.zero, self.one

        while not self.is_zero(r1):
            q, r = self.divmod(r0, r1)
            r0, r1 = r1, r
            s0, s1 = s1, self.sub(s0, self.mul(q, s1))
            t0, t1 = t1, self.sub(t0, self.mul(q, t1))

        unit = self.normalizing_unit(r0)
        g = self.mul(unit, r0)
        s = self.mul(unit, s0)
        t = self.mul(unit, t0)

        # u * a + v * b = 0 with the 2x2 determinant equal to one.
        u = self.neg(self.exact_div(b, g))
        v = self.exact_div(a, g)
        return g, s, t, u, v


@dataclass(frozen=True)
class IntegerRing(Ring):
    """The integers, with Python ``int`` coefficients."""

    is_euclidean = True

    @property
    def zero(self) -> int:
        return 0

    @property
    def one(self) -> int:
        return 1

    def coerce(self, x) -> int:
        return index(x)

    def is_zero(self, a) -> bool:
        return a == 0

    def inverse(self, a) -> Optional[int]:
        return a if a in (1, -1) else None

    def divmod(self, a, b):
        return divmod(a, b)

    def euclidean_degree(self, a) -> int:
        return abs(a)

    def normalizing_unit(self, a) -> int:
        return -1 if a < 0 else 1

    def __str__(self) -> str:
        return "ZZ"


@dataclass(frozen=True)
class RationalField(Ring):
    """The rationals, with ``fractions.Fraction`` coefficients."""

    is_euclidean = True
    is_field = True

    @property
    def zero(self) -> Fraction:
        return Fraction(0)

    @property
    def one(self) -> Fraction:
        return Fraction(1)

    def coerce(self, x) -> Fraction:
        return Fraction(x)

    def is_zero(self, a) -> bool:
        return a == 0

    def inverse(self, a) -> Optional[Fraction]:
        return None if a == 0 else 1 / Fraction(a)

    def divmod(self, a, b):
        return Fraction(a) / b, Fraction(0)

    def euclidean_degree(self, a) -> int:
        return 0

    def normalizing_unit(self, a) -> Fraction:
        return Fraction(1) if a == 0 else 1 / Fraction(a)

    def __str__(self) -> str:
        return "QQ"


@dataclass(frozen=True)
class RingZModN(Ring):
    """Residues modulo ``N``, stored as ints in ``[0, N)``.

    Every operation that needs only units (pivot search, LU) works for
    any ``N``. The ring is Euclidean, and the normal forms are
    available, exactly when ``N`` is prime.
    """

    N: int
    is_euclidean: bool = field(init=False, repr=False, compare=False)
    is_field: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.N < 2:
            raise ContractViolationError(f"modulus must be at least 2, got {self.N}")
        prime = _is_prime(self.N)
        object.__setattr__(self, "is_euclidean", prime)
        object.__setattr__(self, "is_field", prime)

    @property
    def zero(self) -> int:
        return 0

    @property
    def one(self) -> int:
        return 1

    def coerce(self, x) -> int:
        return index(x) % self.N

    def add(self, a, b):
        return (a + b) % self.N

    def sub(self, a, b):
        return (a - b) % self.N

    def neg(self, a):
        return (-a) % self.N

    def mul(self, a, b):
        return (a * b) % self.N

    def is_zero(self, a) -> bool:
        return a % self.N == 0

    def inverse(self, a) -> Optional[int]:
        if math.gcd(a, self.N) != 1:
            return None
        return pow(a, -1, self.N)

    def divmod(self, a, b):
        if not self.is_euclidean:
            raise UnsupportedRingError(f"{self} is not a Euclidean ring")
        return self.mul(a, pow(b, -1, self.N)), 0

    def euclidean_degree(self, a) -> int:
        if not self.is_euclidean:
            raise UnsupportedRingError(f"{self} is not a Euclidean ring")
        return 0

    def normalizing_unit(self, a) -> int:
        if not self.is_euclidean:
            raise UnsupportedRingError(f"{self} is not a Euclidean ring")
        return 1 if a % self.N == 0 else pow(a, -1, self.N)

    def exact_div(self, a, b):
        # unit divisors invert directly, zero divisors fall back to a residue search
        inv = self.inverse(b % self.N)
        if inv is not None:
            return self.mul(a, inv)
        for x in range(self.N):
            if (b * x) % self.N == (a % self.N):
                return x
        raise ContractViolationError(f"Exact division {a}/{b} impossible in Z/{self.N}")

    def divides(self, a, b) -> bool:
        # a | b in Z/N iff gcd(a, N) | b; gcd(0, N) = N covers a = 0.
        return b % math.gcd(a % self.N, self.N) == 0

    def __str__(self) -> str:
        return f"Z/{self.N}"


@dataclass(frozen=True)
class PolynomialRing(Ring):
    """Univariate polynomials over the rationals, as ``sympy.Poly``."""

    symbol: sympy.Symbol = sympy.Symbol("x")

    is_euclidean = True

    @property
    def zero(self) -> sympy.Poly:
        return sympy.Poly(0, self.symbol, domain=sympy.QQ)

    @property
    def one(self) -> sympy.Poly:
        return sympy.Poly(1, self.symbol, domain=sympy.QQ)

    def coerce(self, x) -> sympy.Poly:
        if isinstance(x, sympy.Poly):
            return sympy.Poly(x.as_expr(), self.symbol, domain=sympy.QQ)
        return sympy.Poly(sympy.sympify(x), self.symbol, domain=sympy.QQ)

    def is_zero(self, a) -> bool:
        return a.is_zero

    def inverse(self, a) -> Optional[sympy.Poly]:
        if a.is_zero or a.degree() > 0:
            return None
        return sympy.Poly(1 / a.LC(), self.symbol, domain=sympy.QQ)

    def divmod(self, a, b):
        q, r = a.div(b)
        return q, r

    def euclidean_degree(self, a) -> int:
        return 0 if a.is_zero else int(a.degree())

    def normalizing_unit(self, a) -> sympy.Poly:
        if a.is_zero:
            return self.one
        return sympy.Poly(1 / a.LC(), self.symbol, domain=sympy.QQ)

    def __str__(self) -> str:
        return f"QQ[{self.symbol}]"


def _is_prime(n: int) -> bool:
    if n < 2:
        return False
    if n % 2 == 0:
        return n == 2
    k = 3
    while k * k <= n:
        if n % k == 0:
            return False
        k += 2
    return True


INTEGERS = IntegerRing()
RATIONALS = RationalField()
