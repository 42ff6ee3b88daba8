from collections.abc import Callable, Sequence
from typing import Any, ParamSpec

from jetdiff.autodiff.jet import Jet


def linearize(fun: Callable[..., Any], args: Sequence[Any], /, **kwargs) -> Jet:
    """Evaluate `fun` at `args` on seeded jets.

    The `i`-th argument becomes the independent variable at index `i`. A result that
    does not depend on the arguments is promoted to a constant jet, so the returned
    jet always carries ``len(args)`` partial derivatives.

    Parameters
    ----------
    fun : Callable
        Scalar-valued function of ``len(args)`` arguments.
    args : Sequence
        Point of evaluation.
    **kwargs
        Passed to `fun` unchanged.

    Examples
    --------
    >>> print(linearize(lambda x, y: x * y, (2.0, 5.0)))
    [10.0, (5.0, 2.0)]
    >>> print(linearize(lambda x: 4.0, (1.0,)))
    [4.0, (0.0)]
    """
    result = fun(*Jet.variables(*args), **kwargs)

    if not isinstance(result, Jet):
        result = Jet(len(args), result)

    return result


P = ParamSpec("P")


def grad(fun: Callable[P, Any]) -> Callable[P, tuple[Any, ...]]:
    """Return a function that evaluates the gradient of `fun`.

    Examples
    --------
    >>> df = grad(lambda x, y: x * x + y)
    >>> df(3.0, 4.0)
    (6.0, 1.0)
    """

    def result(*args, **kwargs):
        return tuple(linearize(fun, args, **kwargs).gradient)

    return result  # type: ignore


def deriv(fun: Callable[..., Any]) -> Callable[..., Any]:
    """Return the derivative of a function of one variable.

    Warnings
    --------
    Jets compare by value only, so a branch or :func:`~jetdiff.function.max` in
    `fun` yields the derivative of the piece selected at the point.

    Examples
    --------
    >>> from jetdiff import function as jdf
    >>> df = deriv(lambda x: x**2 + jdf.sqrt(x + 3))
    >>> df(1.0)
    2.25
    """

    def result(x, /, **kwargs):
        return linearize(fun, (x,), **kwargs).gradient[0]

    return result
