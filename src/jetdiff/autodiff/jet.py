from collections.abc import Iterable
from typing import Any, Final, Generic, Protocol, Self, TypeVar

from jetdiff import function as jdf
from jetdiff.autodiff.vector import GradientVector, Scalar, ShapeMismatchError, _divide


class ComparableScalar(Scalar, Protocol):
    """:class:`~jetdiff.autodiff.vector.Scalar` with an order on values."""

    def __lt__(self, rhs: Any, /) -> bool: ...


class Dimension:
    """Number of independent variables tracked by a jet.

    Parameters
    ----------
    n : int
        Non-negative number of variables.
    """

    __slots__ = ("_n",)
    _n: int

    def __init__(self, n: int):
        if not isinstance(n, int):
            raise TypeError(f"dimension must be an integer, not {type(n).__name__}")

        if n < 0:
            raise ValueError(f"dimension must be non-negative, got {n}")

        self._n = n

    @property
    def n(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._n})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dimension):
            return NotImplemented

        return other._n == self._n

    def __hash__(self) -> int:
        return hash(self._n)


def dimension(n: int) -> Dimension:
    """Return the dimension for `n` independent variables."""
    return Dimension(n)


def _resolve_dimension(dim: Dimension | int) -> Dimension:
    return dim if isinstance(dim, Dimension) else Dimension(dim)


def _zero(value):
    # adding 0 maps -0.0 to 0.0
    return value * 0 + 0


T = TypeVar("T", bound=ComparableScalar)


class Jet(Generic[T]):
    r"""Value of a scalar quantity together with its gradient.

    Parameters
    ----------
    dim : Dimension | int
        Number of independent variables.
    value : T, default=0
        Value of the quantity.
    index : int | None, default=None
        If given, the jet is seeded as the independent variable at `index`.
    derivative : T | int, default=1
        Entry placed at ``gradient[index]`` when seeding.

    Attributes
    ----------
    value : T
    gradient : GradientVector[T]

    See Also
    --------
    jet, value_of

    Notes
    -----
    Instances behave like elements of the ring

    .. math::

        T[\varepsilon_1,\dotsc,\varepsilon_n]/(\varepsilon_i\varepsilon_j\mid
        i,j\in\{1,\dotsc,n\}),

    where :math:`n` is the dimension. Operations between two jets require equal
    dimensions and raise :class:`ShapeMismatchError` otherwise. Comparisons look at
    the value only.

    A jet never decays to its value implicitly. Use :func:`value_of` or
    :attr:`value` instead.

    Examples
    --------
    >>> x = Jet(2, 3.0, 0)
    >>> y = Jet(2, 4.0, 1)
    >>> z = x * x + y
    >>> z.value
    13.0
    >>> z.gradient
    GradientVector([6.0, 1.0])
    >>> print(z)
    [13.0, (6.0, 1.0)]
    """

    __slots__ = ("value", "gradient")
    __array_ufunc__ = None
    value: T
    gradient: GradientVector[T]

    def __init__(
        self,
        dim: Dimension | int,
        value: T | int = 0,
        index: int | None = None,
        derivative: T | int = 1,
    ):
        if isinstance(value, Jet):
            raise TypeError("nesting Jet is forbidden")

        zero = _zero(value)
        self.value = value  # type: ignore
        self.gradient = GradientVector.zeros(_resolve_dimension(dim).n, zero)

        if index is not None:
            self.gradient[index] = zero + derivative

    @classmethod
    def fromparts(cls, value: T, gradient: GradientVector[T] | Iterable[T]) -> Self:
        """Assemble a jet from a value and a gradient.

        The elements of `gradient` are copied into a new vector, so the jet never
        shares its gradient with the caller.
        """
        if isinstance(value, Jet):
            raise TypeError("nesting Jet is forbidden")

        return cls._wrap(value, GradientVector(gradient))

    @classmethod
    def _wrap(cls, value: T, gradient: GradientVector[T]) -> Self:
        result = cls.__new__(cls)
        result.value = value
        result.gradient = gradient
        return result

    @classmethod
    def variables(cls, *args: T) -> tuple[Self, ...]:
        """Return one seeded jet per argument.

        The dimension is the number of arguments, and the `i`-th jet is the
        independent variable at index `i`.

        Examples
        --------
        >>> x, y = Jet.variables(1.5, -2.0)
        >>> y.gradient
        GradientVector([0.0, 1.0])
        """
        return tuple(cls(len(args), arg, i) for i, arg in enumerate(args))

    @property
    def dim(self) -> Dimension:
        return Dimension(len(self.gradient))

    def has_same_shape(self, other: "Jet") -> bool:
        return self.gradient.has_same_shape(other.gradient)

    def copy(self) -> Self:
        """Return a copy of the jet."""
        return self._wrap(self.value, self.gradient.copy())

    def set(self, value: T, index: int, derivative: T | int = 1) -> None:
        """Reset the jet in place to the independent variable at `index`.

        The whole gradient is cleared before `derivative` is placed at `index`.
        """
        if isinstance(value, Jet):
            raise TypeError("nesting Jet is forbidden")

        zero = _zero(value)
        gradient = GradientVector.zeros(len(self.gradient), zero)
        gradient[index] = zero + derivative
        self.value = value
        self.gradient = gradient

    def to_string(self) -> str:
        """Return ``[value, (g0, g1, ...)]`` followed by a newline.

        Intended for debugging and test diagnostics.
        """
        return self._format() + "\n"

    def _format(self) -> str:
        gradient = (", ").join(str(x) for x in self.gradient)
        return f"[{self.value}, ({gradient})]"

    def _jetdiff_overload_(self, fun, *args):
        match fun:
            case jdf.exp:
                return self.__exp()

            case jdf.log:
                return self.__log()

            case jdf.sqrt:
                return self.__sqrt()

            case jdf.max:
                return self.__max(*args)

            case jdf.pow:
                if args[0] is self and isinstance(args[1], int):
                    return self.__pow__(args[1])

        return NotImplemented

    def __exp(self) -> Self:
        s = jdf.exp(self.value)
        return self._wrap(s, self.gradient * s)

    def __log(self) -> Self:
        return self._wrap(jdf.log(self.value), self.gradient / self.value)

    def __sqrt(self) -> Self:
        s = jdf.sqrt(self.value)
        return self._wrap(s, self.gradient / (2 * s))

    def __max(self, f, g) -> Self:
        if not isinstance(f, Jet):
            f = self.__class__(self.dim, f)

        if not isinstance(g, Jet):
            g = self.__class__(self.dim, g)

        return (g if less_than(f, g) else f).copy()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self.value!r}, gradient={self.gradient!r})"

    def __str__(self) -> str:
        return self._format()

    def __bool__(self) -> bool:
        raise TypeError("the truth value of a Jet is ambiguous; use value_of()")

    def __eq__(self, other: object) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return equals(self, other)

    def __ne__(self, other: object) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return not_equals(self, other)

    def __lt__(self, other: Any) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return less_than(self, other)

    def __le__(self, other: Any) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return less_equal(self, other)

    def __gt__(self, other: Any) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return greater_than(self, other)

    def __ge__(self, other: Any) -> bool:
        if not _is_acceptable(other):
            return NotImplemented

        return greater_equal(self, other)

    __hash__ = None  # type: ignore

    def __add__(self, rhs: Self | T | int | float) -> Self:
        if not _is_acceptable(rhs):
            return NotImplemented

        return add(self, rhs)

    def __sub__(self, rhs: Self | T | int | float) -> Self:
        if not _is_acceptable(rhs):
            return NotImplemented

        return sub(self, rhs)

    def __mul__(self, rhs: Self | T | int | float) -> Self:
        if not _is_acceptable(rhs):
            return NotImplemented

        return mul(self, rhs)

    def __truediv__(self, rhs: Self | T | int | float) -> Self:
        if not _is_acceptable(rhs):
            return NotImplemented

        return div(self, rhs)

    def __pow__(self, rhs: int) -> Self:
        if not isinstance(rhs, int):
            return NotImplemented

        if rhs == 0:
            return self.__class__(self.dim, self.value**0)

        imag = self.gradient * (rhs * _ipow(self.value, rhs - 1))
        return self._wrap(_ipow(self.value, rhs), imag)

    def __neg__(self) -> Self:
        return neg(self)

    def __pos__(self) -> Self:
        return self.copy()

    def __radd__(self, lhs: T | int | float) -> Self:
        if not _is_acceptable(lhs):
            return NotImplemented

        return add(lhs, self)

    def __rsub__(self, lhs: T | int | float) -> Self:
        if not _is_acceptable(lhs):
            return NotImplemented

        return sub(lhs, self)

    def __rmul__(self, lhs: T | int | float) -> Self:
        if not _is_acceptable(lhs):
            return NotImplemented

        return mul(lhs, self)

    def __rtruediv__(self, lhs: T | int | float) -> Self:
        if not _is_acceptable(lhs):
            return NotImplemented

        return div(lhs, self)


def jet(
    dim: Dimension | int,
    value: T | int = 0,
    index: int | None = None,
    derivative: T | int = 1,
) -> Jet[T]:
    """Return a jet.

    Without `index` the jet is a constant with a zero gradient; with `index` it is
    the independent variable at that position.

    Examples
    --------
    >>> dim = dimension(3)
    >>> jet(dim, 2.0).gradient
    GradientVector([0.0, 0.0, 0.0])
    >>> jet(dim, 2.0, 1, 0.5).gradient
    GradientVector([0.0, 0.5, 0.0])
    """
    return Jet(dim, value, index, derivative)  # type: ignore


def value_of(x: Any) -> Any:
    """Return the value of a jet, or `x` itself if it is not a jet."""
    return x.value if isinstance(x, Jet) else x


_NOT_SCALAR: Final = (GradientVector, Dimension)


def _is_acceptable(value: object) -> bool:
    return not isinstance(value, _NOT_SCALAR)


def _ipow(x, n: int):
    return x**n if n >= 0 else _divide(1, x ** (-n))


def _checkoperands(f: Any, g: Any) -> None:
    if not (_is_acceptable(f) and _is_acceptable(g)):
        raise TypeError("operands must be jets or scalars")

    if not (isinstance(f, Jet) or isinstance(g, Jet)):
        raise TypeError("at least one operand must be a Jet")

    if isinstance(f, Jet) and isinstance(g, Jet) and not f.has_same_shape(g):
        raise ShapeMismatchError(
            f"dimensions differ: {len(f.gradient)} and {len(g.gradient)}"
        )


def add(f, g):
    """Return ``f + g``; either operand may be a scalar."""
    _checkoperands(f, g)

    match f, g:
        case Jet(), Jet():
            return f._wrap(f.value + g.value, f.gradient + g.gradient)

        case Jet(), _:
            return f._wrap(f.value + g, f.gradient.copy())

        case _:
            return g._wrap(f + g.value, g.gradient.copy())


def sub(f, g):
    """Return ``f - g``; either operand may be a scalar."""
    _checkoperands(f, g)

    match f, g:
        case Jet(), Jet():
            return f._wrap(f.value - g.value, f.gradient - g.gradient)

        case Jet(), _:
            return f._wrap(f.value - g, f.gradient.copy())

        case _:
            return g._wrap(f - g.value, -g.gradient)


def neg(f):
    """Return ``-f``."""
    if not isinstance(f, Jet):
        raise TypeError("operand must be a Jet")

    return f._wrap(-f.value, -f.gradient)


def mul(f, g):
    """Return ``f * g`` by the product rule; either operand may be a scalar."""
    _checkoperands(f, g)

    match f, g:
        case Jet(), Jet():
            imag = g.gradient * f.value + f.gradient * g.value
            return f._wrap(f.value * g.value, imag)

        case Jet(), _:
            return f._wrap(f.value * g, f.gradient * g)

        case _:
            return g._wrap(g.value * f, g.gradient * f)


def div(f, g):
    r"""Return ``f / g`` by the quotient rule; either operand may be a scalar.

    Division by a zero value is not an error. For builtin and numpy reals the result
    follows IEEE 754, so ``inf`` and ``nan`` propagate through the value and the
    gradient.

    Examples
    --------
    >>> x, y = Jet.variables(1.0, 0.0)
    >>> print(div(x, y))
    [inf, (nan, nan)]

    Notes
    -----
    For a scalar numerator :math:`s`, the dual unit is rationalized away:

    .. math::

        \frac{s}{x + \varepsilon g} = \frac{s}{x} - \varepsilon\frac{sg}{x^2}.
    """
    _checkoperands(f, g)

    match f, g:
        case Jet(), Jet():
            imag = f.gradient / g.value - (g.gradient * f.value) / (g.value * g.value)
            return f._wrap(_divide(f.value, g.value), imag)

        case Jet(), _:
            return f._wrap(_divide(f.value, g), f.gradient / g)

        case _:
            imag = g.gradient * -f / (g.value * g.value)
            return g._wrap(_divide(f, g.value), imag)


def equals(f, g) -> bool:
    """Return ``value_of(f) == value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) == value_of(g)


def not_equals(f, g) -> bool:
    """Return ``value_of(f) != value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) != value_of(g)


def less_than(f, g) -> bool:
    """Return ``value_of(f) < value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) < value_of(g)


def less_equal(f, g) -> bool:
    """Return ``value_of(f) <= value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) <= value_of(g)


def greater_than(f, g) -> bool:
    """Return ``value_of(f) > value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) > value_of(g)


def greater_equal(f, g) -> bool:
    """Return ``value_of(f) >= value_of(g)``; gradients are ignored."""
    _checkoperands(f, g)
    return value_of(f) >= value_of(g)
