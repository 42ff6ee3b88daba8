"""
################################################
Mathematical functions (:mod:`jetdiff.function`)
################################################

.. currentmodule:: jetdiff.function

This module provides the elementary functions that jets propagate derivatives
through. Each function accepts plain numbers as well as jets. Real arguments are
evaluated with numpy in IEEE 754 arithmetic, so overflow and arguments outside the
domain give ``inf`` or ``nan`` rather than an exception.

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    log
    pow
    sqrt

Selection
=========

.. autosummary::
    :toctree: generated/

    max

"""

import builtins
import numbers
from typing import Any, overload

import mpmath
import mpmath.ctx_mp_python
import numpy as np


def _ieee(ufunc, *args):
    # overflow and domain errors give inf or nan instead of raising
    with np.errstate(all="ignore"):
        return float(ufunc(*(float(x) for x in args)))


def _dispatch(fun, *args):
    linearized = args

    if len(args) == 2 and type(args[0]) is not type(args[1]):
        if issubclass(type(args[1]), type(args[0])):
            linearized = (args[1], args[0])

    for z in linearized:
        if hook := getattr(type(z), "_jetdiff_overload_", None):
            if (res := hook(z, fun, *args)) is not NotImplemented:
                return res

    return NotImplemented


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


def exp(x, /):
    """Exponential.

    For a jet `f`, the result is ``(exp(v), exp(v) * G)``.

    Examples
    --------
    >>> print(format(exp(2), ".6f"))
    7.389056
    >>> from jetdiff.autodiff import Jet
    >>> y = exp(Jet(1, 0.0, 0))
    >>> print(y)
    [1.0, (1.0)]
    """
    if (res := _dispatch(exp, x)) is not NotImplemented:
        return res

    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpmath.exp(x)

        case numbers.Real():
            return _ieee(np.exp, x)

        case _:
            raise TypeError(f"unsupported operand type for exp: {type(x).__name__}")


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


def log(x, /):
    """Natural logarithm.

    For a jet `f`, the result is ``(log(v), G / v)``. Non-positive values are not
    checked. For a real argument the result is ``nan`` or ``-inf`` as in IEEE 754,
    and mpmath numbers give a complex logarithm.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> from jetdiff.autodiff import Jet
    >>> y = log(Jet(1, 4.0, 0))
    >>> y.gradient
    GradientVector([0.25])
    """
    if (res := _dispatch(log, x)) is not NotImplemented:
        return res

    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpmath.log(x)

        case numbers.Real():
            return _ieee(np.log, x)

        case _:
            raise TypeError(f"unsupported operand type for log: {type(x).__name__}")


@overload
def max(x: float | int, y: float | int, /) -> float | int: ...


@overload
def max(x: Any, y: Any, /) -> Any: ...


def max(x, y, /):
    """Larger of `x` and `y`.

    For jets, `y` is returned if ``x < y`` and `x` otherwise. The whole winning jet,
    value and gradient, is returned rather than a combination of the two.

    Examples
    --------
    >>> from jetdiff.autodiff import Jet
    >>> x, y = Jet.variables(1.0, 3.0)
    >>> print(max(x, y))
    [3.0, (0.0, 1.0)]
    """
    if (res := _dispatch(max, x, y)) is not NotImplemented:
        return res

    mpnumeric = mpmath.ctx_mp_python.mpnumeric

    match x, y:
        case (mpnumeric(), _) | (_, mpnumeric()):
            return y if x < y else x

        case (numbers.Real(), numbers.Real()):
            return builtins.max(x, y)

        case _:
            raise TypeError


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: int, /) -> Any: ...


def pow(x, y, /):
    """`x` raised to the power `y`.

    Jets support integer exponents only.

    Examples
    --------
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    >>> from jetdiff.autodiff import Jet
    >>> pow(Jet(1, 3.0, 0), 2).gradient
    GradientVector([6.0])
    """
    if (res := _dispatch(pow, x, y)) is not NotImplemented:
        return res

    mpnumeric = mpmath.ctx_mp_python.mpnumeric

    match x, y:
        case (mpnumeric(), _) | (_, mpnumeric()):
            return mpmath.power(x, y)

        case (numbers.Real(), numbers.Real()):
            return _ieee(np.power, x, y)

        case _:
            raise TypeError


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


def sqrt(x, /):
    """Square root.

    For a jet `f`, the result is ``(sqrt(v), G / (2 * sqrt(v)))``.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    >>> from jetdiff.autodiff import Jet
    >>> y = sqrt(Jet(1, 4.0, 0))
    >>> y.gradient
    GradientVector([0.25])
    >>> print(sqrt(Jet(1, 0.0, 0)))
    [0.0, (inf)]
    """
    if (res := _dispatch(sqrt, x)) is not NotImplemented:
        return res

    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpmath.sqrt(x)

        case numbers.Real():
            return _ieee(np.sqrt, x)

        case _:
            raise TypeError(f"unsupported operand type for sqrt: {type(x).__name__}")
