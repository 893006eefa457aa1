"""Coefficient rings for the elimination engine.

A ring is an object whose methods act on plain element values, e.g.
``ring.add(a, b)``. The engine only relies on the Euclidean contract:
``divmod`` returns a remainder of strictly smaller ``degree`` than the
divisor, and ``degree(0) == 0``. Rings violating this contract can make the
Smith reduction loop forever.
"""

from fractions import Fraction
from typing import Any, Tuple

import sympy as sp


class EuclideanRing:
    """Base class for Euclidean domains.

    Subclasses override ``divmod``, ``degree`` and the unit helpers. The
    arithmetic defaults delegate to the element type's own operators.
    """

    zero: Any = 0
    one: Any = 1
    name = "R"

    def coerce(self, x):
        return x

    def add(self, a, b):
        return a + b

    def sub(self, a, b):
        return a - b

    def neg(self, a):
        return -a

    def mul(self, a, b):
        return a * b

    def eq(self, a, b) -> bool:
        return a == b

    def is_zero(self, a) -> bool:
        return a == self.zero

    def divmod(self, a, b):
        raise NotImplementedError

    def quo(self, a, b):
        return self.divmod(a, b)[0]

    def rem(self, a, b):
        return self.divmod(a, b)[1]

    def degree(self, a) -> int:
        raise NotImplementedError

    def weight(self, a) -> int:
        """Cost of carrying ``a`` in a row; only used to break pivot ties."""
        return self.degree(a)

    def normalizing_unit(self, a):
        return self.one

    def normalize(self, a):
        return self.mul(a, self.normalizing_unit(a))

    def is_normalized(self, a) -> bool:
        return self.eq(self.normalizing_unit(a), self.one)

    def is_unit(self, a) -> bool:
        raise NotImplementedError

    def inverse(self, a):
        raise NotImplementedError

    def divides(self, a, b) -> bool:
        """Return True if ``a | b``."""
        if self.is_zero(a):
            return self.is_zero(b)
        return self.is_zero(self.rem(b, a))

    def gcdex_primitive(self, a, b) -> Tuple[Any, Any, Any]:
        """
        Extended Euclidean algorithm.
        Returns (g, s, t) such that s*a + t*b = g
        """
        r0, r1 = a, b
        s0, s1 = self.one, self.zero
        t0, t1 = self.zero, self.one

        while not self.is_zero(r1):
            q, r = self.divmod(r0, r1)
            r0, r1 = r1, r
            s0, s1 = s1, self.sub(s0, self.mul(q, s1))
            t0, t1 = t1, self.sub(t0, self.mul(q, t1))

        return r0, s0, t0

    def gcdex(self, a, b):
        """
        Returns g, s, t, u, v such that:
        [[s, t], [u, v]] * [a, b]^T = [g, 0]^T
        and sv - tu is a unit.
        """
        if self.is_zero(a) and self.is_zero(b):
            # Case 0, 0
            return self.zero, self.one, self.zero, self.zero, self.one

        if self.divides(a, b):
            # a | b: keep a as the gcd without any mixing.
            return a, self.one, self.zero, self.neg(self.quo(b, a)), self.one

        g, s, t = self.gcdex_primitive(a, b)

        # u, v complete the unimodular matrix and zero out the second row.
        u = self.neg(self.quo(b, g))
        v = self.quo(a, g)
        return g, s, t, u, v

    def to_sympy(self, a):
        return sp.sympify(a)

    def format(self, a) -> str:
        return str(a)

    def __eq__(self, other):
        return type(self) is type(other)

    def __hash__(self):
        return hash(type(self))

    def __repr__(self):
        return self.name


class IntegerRing(EuclideanRing):
    """The integers with floor division."""

    name = "ZZ"

    def coerce(self, x):
        return int(x)

    def divmod(self, a, b):
        return divmod(a, b)

    def degree(self, a) -> int:
        return abs(a)

    def weight(self, a) -> int:
        return abs(a).bit_length()

    def normalizing_unit(self, a):
        return -1 if a < 0 else 1

    def is_unit(self, a) -> bool:
        return a in (1, -1)

    def inverse(self, a):
        if not self.is_unit(a):
            raise ValueError(f"{a} is not a unit in {self.name}")
        return a


class Field(EuclideanRing):
    """Shared behaviour of fields: every non-zero element is a unit."""

    def divmod(self, a, b):
        return self.mul(a, self.inverse(b)), self.zero

    def degree(self, a) -> int:
        return 0 if self.is_zero(a) else 1

    def normalizing_unit(self, a):
        return self.one if self.is_zero(a) else self.inverse(a)

    def is_unit(self, a) -> bool:
        return not self.is_zero(a)


class RationalField(Field):
    name = "QQ"
    zero = Fraction(0)
    one = Fraction(1)

    def coerce(self, x):
        return Fraction(x)

    def inverse(self, a):
        if a == 0:
            raise ValueError("0 is not invertible in QQ")
        return 1 / a

    def weight(self, a) -> int:
        if a == 0:
            return 0
        return abs(a.numerator).bit_length() + a.denominator.bit_length()


class PrimeField(Field):
    """The finite field Z/pZ, elements kept as integers in ``[0, p)``."""

    def __init__(self, p: int):
        if p < 2 or not sp.isprime(p):
            raise ValueError(f"PrimeField requires a prime modulus, got {p}")
        self.p = p
        self.name = f"GF({p})"

    def coerce(self, x):
        return int(x) % self.p

    def add(self, a, b):
        return (a + b) % self.p

    def sub(self, a, b):
        return (a - b) % self.p

    def neg(self, a):
        return (-a) % self.p

    def mul(self, a, b):
        return (a * b) % self.p

    def is_zero(self, a) -> bool:
        return a % self.p == 0

    def inverse(self, a):
        if self.is_zero(a):
            raise ValueError(f"0 is not invertible in {self.name}")
        return pow(a, -1, self.p)

    def __eq__(self, other):
        return isinstance(other, PrimeField) and other.p == self.p

    def __hash__(self):
        return hash((PrimeField, self.p))


class PolynomialRing(EuclideanRing):
    """Univariate polynomials over a field, backed by ``sympy.Poly``.

    ``degree`` is shifted by one so that non-zero constants rank above zero.
    """

    def __init__(self, symbol="x", domain="QQ"):
        self.gen = sp.Symbol(symbol) if isinstance(symbol, str) else symbol
        self.domain = domain
        self.name = f"{domain}[{self.gen}]"
        self.zero = sp.Poly(0, self.gen, domain=domain)
        self.one = sp.Poly(1, self.gen, domain=domain)

    def coerce(self, x):
        if isinstance(x, sp.Poly):
            return x
        return sp.Poly(x, self.gen, domain=self.domain)

    def is_zero(self, a) -> bool:
        return a.is_zero

    def divmod(self, a, b):
        return a.div(b)

    def degree(self, a) -> int:
        return 0 if a.is_zero else a.degree() + 1

    def weight(self, a) -> int:
        return 0 if a.is_zero else len(a.terms())

    def normalizing_unit(self, a):
        if a.is_zero:
            return self.one
        return self.coerce(1 / a.LC())

    def is_unit(self, a) -> bool:
        return not a.is_zero and a.degree() == 0

    def inverse(self, a):
        if not self.is_unit(a):
            raise ValueError(f"{a.as_expr()} is not a unit in {self.name}")
        return self.coerce(1 / a.LC())

    def to_sympy(self, a):
        return a.as_expr()

    def format(self, a) -> str:
        return str(a.as_expr())

    def __eq__(self, other):
        return (
            isinstance(other, PolynomialRing)
            and other.gen == self.gen
            and other.domain == self.domain
        )

    def __hash__(self):
        return hash((PolynomialRing, self.gen, str(self.domain)))


ZZ = IntegerRing()
QQ = RationalField()
