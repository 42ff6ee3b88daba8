"""
############################################
Gradient checking (:mod:`jetdiff.gradcheck`)
############################################

.. currentmodule:: jetdiff.gradcheck

This module uses jets as a ground truth for hand-written backward passes. The
function under test is evaluated on seeded jets, and the resulting gradient is
compared elementwise with the gradient computed independently.

Checking
========

.. autosummary::
    :toctree: generated/

    check_grad
    assert_grad
    GradCheckResult
    GradCheckError

Context
=======

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
import dataclasses
from collections.abc import Callable, Sequence
from typing import Any, Self

import numpy as np
import numpy.typing as npt

from jetdiff.autodiff.autodiff import linearize
from jetdiff.autodiff.jet import Jet
from jetdiff.autodiff.vector import ShapeMismatchError


class GradCheckError(AssertionError):
    """Error raised by :func:`assert_grad` when the gradients disagree."""


class Context:
    """Create a new context.

    The context holds the tolerances used to compare gradients, with the same
    meaning as in :func:`numpy.isclose`.

    Parameters
    ----------
    rtol : float, default=1e-5
        Relative tolerance.
    atol : float, default=1e-8
        Absolute tolerance.
    """

    __slots__ = ("_rtol", "_atol")
    _rtol: float
    _atol: float

    def __init__(self, rtol: float = 1e-5, atol: float = 1e-8):
        if rtol < 0 or atol < 0:
            raise ValueError("tolerances must be non-negative")

        self._rtol = rtol
        self._atol = atol

    @property
    def rtol(self) -> float:
        return self._rtol

    @property
    def atol(self) -> float:
        return self._atol

    def copy(self) -> Self:
        return self.__class__(self._rtol, self._atol)

    def __repr__(self):
        return f"{type(self).__name__}(rtol={self._rtol!r}, atol={self._atol!r})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("gradcheck")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(
    ctx: Context | None = None, *, rtol: float | None = None, atol: float | None = None
):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> with localcontext(rtol=1e-3) as ctx:
    ...     print(ctx.rtol, getcontext().rtol)
    0.001 0.001
    """
    if ctx is None:
        ctx = getcontext()

    ctx = Context(ctx.rtol if rtol is None else rtol, ctx.atol if atol is None else atol)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)


@dataclasses.dataclass(frozen=True, eq=False)
class GradCheckResult:
    """Outcome of :func:`check_grad`.

    Attributes
    ----------
    jet : Jet
        Result of the function evaluated on seeded jets.
    computed : ndarray
        Gradient obtained by forward-mode differentiation.
    expected : ndarray
        Gradient under test.
    mismatches : tuple[int, ...]
        Indices at which the two gradients are not close.
    """

    jet: Jet
    computed: npt.NDArray[np.float64]
    expected: npt.NDArray[np.float64]
    mismatches: tuple[int, ...]

    @property
    def ok(self) -> bool:
        return len(self.mismatches) == 0

    @property
    def value(self) -> Any:
        return self.jet.value


def check_grad(
    fun: Callable[..., Any],
    args: Sequence[Any],
    expected: Sequence[Any] | npt.ArrayLike,
    *,
    rtol: float | None = None,
    atol: float | None = None,
) -> GradCheckResult:
    """Compare the gradient of `fun` at `args` with `expected`.

    Parameters
    ----------
    fun : Callable
        Scalar-valued function of ``len(args)`` arguments.
    args : Sequence
        Point at which `fun` is differentiated.
    expected : Sequence | ArrayLike
        Gradient to verify, e.g., the output of a backward pass.
    rtol : float | None, default=None
        Relative tolerance. If `rtol` is ``None``, the one of the current context is
        used.
    atol : float | None, default=None
        Absolute tolerance. If `atol` is ``None``, the one of the current context is
        used.

    Returns
    -------
    GradCheckResult

    Raises
    ------
    ShapeMismatchError
        If the length of `expected` differs from the number of arguments.

    Examples
    --------
    >>> r = check_grad(lambda x, y: x * x + y, (3.0, 4.0), [6.0, 1.0])
    >>> r.ok, r.value
    (True, 13.0)
    >>> check_grad(lambda x, y: x * y, (3.0, 4.0), [4.0, 4.0]).mismatches
    (1,)
    """
    ctx = getcontext()
    rtol = ctx.rtol if rtol is None else rtol
    atol = ctx.atol if atol is None else atol

    result = linearize(fun, args)
    computed = np.array([float(x) for x in result.gradient], dtype=np.float64)
    target = np.asarray(expected, dtype=np.float64).reshape(-1)

    if computed.shape != target.shape:
        raise ShapeMismatchError(
            f"expected {computed.size} partial derivatives, got {target.size}"
        )

    close = np.isclose(computed, target, rtol=rtol, atol=atol)
    mismatches = tuple(int(i) for i in np.flatnonzero(~close))
    return GradCheckResult(result, computed, target, mismatches)


def assert_grad(
    fun: Callable[..., Any],
    args: Sequence[Any],
    expected: Sequence[Any] | npt.ArrayLike,
    *,
    rtol: float | None = None,
    atol: float | None = None,
) -> GradCheckResult:
    """Same as :func:`check_grad`, but raise :class:`GradCheckError` on mismatch."""
    result = check_grad(fun, args, expected, rtol=rtol, atol=atol)

    if not result.ok:
        lines = [f"gradient mismatch at indices {list(result.mismatches)}"]

        for i in result.mismatches:
            got, want = result.computed[i], result.expected[i]
            lines.append(f"  [{i}] computed={got!r} expected={want!r}")

        lines.append(f"jet: {result.jet.to_string()}")
        raise GradCheckError("\n".join(lines))

    return result
