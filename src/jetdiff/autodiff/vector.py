from collections.abc import Iterable, Iterator
from typing import Any, Final, Generic, Protocol, Self, TypeVar

import numpy as np


class Scalar(Protocol):
    """Element type of a gradient, closed under ``+``, ``-``, ``*``, ``/`` and
    negation."""

    def __add__(self, rhs: Any, /) -> Any: ...

    def __sub__(self, rhs: Any, /) -> Any: ...

    def __mul__(self, rhs: Any, /) -> Any: ...

    def __truediv__(self, rhs: Any, /) -> Any: ...

    def __neg__(self) -> Any: ...


class ShapeMismatchError(ValueError):
    """Error raised when operands track different numbers of variables."""


class IndexOutOfRangeError(IndexError):
    """Error raised by bounds-checked access to :class:`GradientVector`."""


_REAL: Final = (float, int)


def _divide(x, y):
    # IEEE 754 semantics for builtin reals: x / 0 is inf or nan
    if isinstance(x, _REAL) and isinstance(y, _REAL) and y == 0:
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.true_divide(x, y))

    return x / y


T = TypeVar("T", bound=Scalar)


class GradientVector(Generic[T]):
    """Dense vector of partial derivatives with a fixed length.

    Parameters
    ----------
    coeffs : Iterable[T]
        Elements of the vector.

    Notes
    -----
    The length is fixed at construction. Indexing is bounds-checked, and negative
    indices are rejected. Binary operations between two vectors require equal lengths,
    and a mismatch raises :class:`ShapeMismatchError` instead of truncating.

    Examples
    --------
    >>> a = GradientVector([1.0, 2.0])
    >>> b = GradientVector([0.5, -1.0])
    >>> a + b
    GradientVector([1.5, 1.0])
    >>> 2 * a - b
    GradientVector([1.5, 5.0])
    """

    __slots__ = ("_coeffs",)
    __array_ufunc__ = None
    _coeffs: list[T]

    def __init__(self, coeffs: Iterable[T]):
        self._coeffs = list(coeffs)

    @classmethod
    def zeros(cls, n: int, zero: T | int = 0) -> Self:
        """Return the vector of length `n` whose elements are all `zero`."""
        if n < 0:
            raise ValueError(f"length must be non-negative, got {n}")

        return cls([zero] * n)  # type: ignore

    def has_same_shape(self, other: "GradientVector") -> bool:
        return len(self._coeffs) == len(other._coeffs)

    def at(self, key: int) -> T:
        """Return the element at `key`.

        Raises
        ------
        IndexOutOfRangeError
            If `key` is not in ``range(len(self))``.
        """
        return self._coeffs[self._checkindex(key)]

    def copy(self) -> Self:
        """Return a copy of the vector."""
        return self.__class__(self._coeffs)

    def tolist(self) -> list[T]:
        return list(self._coeffs)

    def _checkindex(self, key: int) -> int:
        if not isinstance(key, int):
            raise TypeError(f"indices must be integers, not {type(key).__name__}")

        if not 0 <= key < len(self._coeffs):
            raise IndexOutOfRangeError(
                f"index {key} is out of range for length {len(self._coeffs)}"
            )

        return key

    def _checkshape(self, other: "GradientVector") -> None:
        if not self.has_same_shape(other):
            raise ShapeMismatchError(
                f"lengths differ: {len(self._coeffs)} and {len(other._coeffs)}"
            )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._coeffs!r})"

    def __len__(self) -> int:
        return len(self._coeffs)

    def __iter__(self) -> Iterator[T]:
        return iter(self._coeffs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GradientVector):
            return NotImplemented

        return len(other) == len(self) and other._coeffs == self._coeffs

    def __getitem__(self, key: int) -> T:
        return self._coeffs[self._checkindex(key)]

    def __setitem__(self, key: int, value: T) -> None:
        self._coeffs[self._checkindex(key)] = value

    def __add__(self, rhs: Self) -> Self:
        if not isinstance(rhs, GradientVector):
            return NotImplemented

        self._checkshape(rhs)
        return self.__class__(x + y for x, y in zip(self._coeffs, rhs._coeffs))

    def __sub__(self, rhs: Self) -> Self:
        if not isinstance(rhs, GradientVector):
            return NotImplemented

        self._checkshape(rhs)
        return self.__class__(x - y for x, y in zip(self._coeffs, rhs._coeffs))

    def __mul__(self, rhs: T | int | float) -> Self:
        if isinstance(rhs, GradientVector):
            return NotImplemented

        return self.__class__(x * rhs for x in self._coeffs)

    def __truediv__(self, rhs: T | int | float) -> Self:
        if isinstance(rhs, GradientVector):
            return NotImplemented

        return self.__class__(_divide(x, rhs) for x in self._coeffs)

    def __neg__(self) -> Self:
        return self.__class__(-x for x in self._coeffs)

    def __pos__(self) -> Self:
        return self.__class__(self._coeffs)

    def __rmul__(self, lhs: T | int | float) -> Self:
        if isinstance(lhs, GradientVector):
            return NotImplemented

        return self.__class__(lhs * x for x in self._coeffs)
