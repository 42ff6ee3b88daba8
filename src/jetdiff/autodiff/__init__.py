"""
####################################################
Automatic differentiation (:mod:`jetdiff.autodiff`)
####################################################

.. currentmodule:: jetdiff.autodiff

This module provides forward-mode automatic differentiation with jets, i.e., values
paired with their gradient with respect to a fixed set of independent variables.

Jets
----

.. autosummary::
    :toctree: generated/

    ComparableScalar
    Dimension
    GradientVector
    Jet
    Scalar
    dimension
    jet
    value_of

Operations
----------

.. autosummary::
    :toctree: generated/

    add
    sub
    neg
    mul
    div
    equals
    not_equals
    less_than
    less_equal
    greater_than
    greater_equal

Differential operators
----------------------

.. autosummary::
    :toctree: generated/

    deriv
    grad
    linearize

Exceptions
----------

.. autosummary::
    :toctree: generated/

    IndexOutOfRangeError
    ShapeMismatchError

"""

from .autodiff import deriv, grad, linearize
from .jet import (
    ComparableScalar,
    Dimension,
    Jet,
    add,
    dimension,
    div,
    equals,
    greater_equal,
    greater_than,
    jet,
    less_equal,
    less_than,
    mul,
    neg,
    not_equals,
    sub,
    value_of,
)
from .vector import GradientVector, IndexOutOfRangeError, Scalar, ShapeMismatchError

__all__ = [
    "deriv",
    "grad",
    "linearize",
    "ComparableScalar",
    "Dimension",
    "GradientVector",
    "Jet",
    "dimension",
    "jet",
    "value_of",
    "add",
    "sub",
    "neg",
    "mul",
    "div",
    "equals",
    "not_equals",
    "less_than",
    "less_equal",
    "greater_than",
    "greater_equal",
    "Scalar",
    "IndexOutOfRangeError",
    "ShapeMismatchError",
]
