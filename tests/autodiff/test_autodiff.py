import math

import pytest

from jetdiff import function as jdf
from jetdiff.autodiff import autodiff


def test_deriv():
    deriv = autodiff.deriv(lambda x: x * jdf.exp(x))
    assert pytest.approx(deriv(1.4), 1e-12) == 2.4 * math.exp(1.4)

    deriv = autodiff.deriv(lambda x: (x + jdf.sqrt(x**2 + 1)) / x)
    expected = (1.4 / math.sqrt(1.4**2 + 1) * 1.4 - math.sqrt(1.4**2 + 1)) / 1.4**2
    assert pytest.approx(deriv(1.4), 1e-12) == expected


def test_grad():
    grad = autodiff.grad(lambda x, y: jdf.exp(y / x) + 2)
    assert pytest.approx(grad(1.2, 3.5), 1e-5) == (-44.9157, 15.3997)

    grad = autodiff.grad(lambda x, y: jdf.log(x * y) + jdf.sqrt(x))
    assert pytest.approx(grad(2.0, 3.0), 1e-12) == (0.5 + 0.25 * math.sqrt(2), 1 / 3)


def test_grad_of_constant():
    grad = autodiff.grad(lambda x, y: 5.0)
    assert grad(1.0, 2.0) == (0.0, 0.0)


def test_grad_through_max():
    grad = autodiff.grad(lambda x, y: 2 * jdf.max(x, y))
    assert grad(1.0, 3.0) == (0.0, 2.0)
    assert grad(4.0, 3.0) == (2.0, 0.0)


def test_linearize():
    y = autodiff.linearize(lambda x, y: x * y - jdf.exp(y), (2.0, 3.0))
    assert y.value == pytest.approx(6.0 - math.exp(3.0), 1e-12)
    assert pytest.approx(tuple(y.gradient), 1e-12) == (3.0, 2.0 - math.exp(3.0))

    y = autodiff.linearize(lambda x, *, scale: scale * x, (2.0,), scale=4.0)
    assert (y.value, y.gradient.tolist()) == (8.0, [4.0])

    y = autodiff.linearize(lambda x, y: 1.5, (2.0, 3.0))
    assert (y.value, y.gradient.tolist()) == (1.5, [0.0, 0.0])
