from .elimination import eliminate, smith_normal_form
from .eliminator import Eliminator, Form
from .matrix import RingMatrix
from .result import EliminationResult
from .ring import QQ, ZZ, EuclideanRing, PolynomialRing, PrimeField

__all__ = [
    "eliminate",
    "smith_normal_form",
    "Eliminator",
    "Form",
    "RingMatrix",
    "EliminationResult",
    "EuclideanRing",
    "PolynomialRing",
    "PrimeField",
    "QQ",
    "ZZ",
]
