from .autodiff import GradientVector, Jet, deriv, dimension, grad, jet, linearize, value_of
from .function import exp, log, max, pow, sqrt

__all__ = [
    "GradientVector",
    "Jet",
    "deriv",
    "dimension",
    "grad",
    "jet",
    "linearize",
    "value_of",
    "exp",
    "log",
    "max",
    "pow",
    "sqrt",
]
