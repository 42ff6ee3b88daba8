import contextvars

import numpy as np
import pytest

from jetdiff import function as jdf
from jetdiff.autodiff import ShapeMismatchError
from jetdiff.gradcheck import (
    Context,
    GradCheckError,
    assert_grad,
    check_grad,
    getcontext,
    localcontext,
    setcontext,
)


def l2_loss(*x, target):
    return sum(((xi - ti) * (xi - ti) for xi, ti in zip(x, target)), 0.0) * 0.5


def l2_loss_backward(x, target):
    return [xi - ti for xi, ti in zip(x, target)]


def log_softmax_first(*x):
    total = sum((jdf.exp(xi) for xi in x[1:]), jdf.exp(x[0]))
    return x[0] - jdf.log(total)


def log_softmax_first_backward(x):
    p = np.exp(x) / np.exp(x).sum()
    grad = -p
    grad[0] += 1.0
    return grad


def test_l2_loss():
    x = [0.5, -1.25, 3.0]
    target = [1.0, 0.0, 2.5]
    result = assert_grad(
        lambda *v: l2_loss(*v, target=target), x, l2_loss_backward(x, target)
    )
    assert result.ok
    assert result.value == pytest.approx(0.5 * (0.25 + 1.5625 + 0.25))
    np.testing.assert_allclose(result.computed, [-0.5, -1.25, 0.5])


def test_log_softmax():
    x = np.array([0.2, -1.0, 2.5, 0.0])
    assert_grad(log_softmax_first, x.tolist(), log_softmax_first_backward(x))


def test_relu():
    def relu_sum(*x):
        return sum((jdf.max(xi, 0.0) for xi in x), 0.0)

    result = check_grad(relu_sum, [1.5, -2.0, 0.25], [1.0, 0.0, 1.0])
    assert result.ok


def test_wrong_backward_is_reported():
    x = [0.5, -1.25, 3.0]
    target = [1.0, 0.0, 2.5]
    wrong = l2_loss_backward(x, target)
    wrong[1] *= 2

    result = check_grad(lambda *v: l2_loss(*v, target=target), x, wrong)
    assert not result.ok
    assert result.mismatches == (1,)

    with pytest.raises(GradCheckError, match=r"indices \[1\]"):
        assert_grad(lambda *v: l2_loss(*v, target=target), x, wrong)


def test_expected_length_mismatch():
    with pytest.raises(ShapeMismatchError):
        check_grad(lambda x, y: x * y, [1.0, 2.0], [1.0, 2.0, 3.0])


def test_constant_function():
    result = check_grad(lambda x, y: 4.0, [1.0, 2.0], [0.0, 0.0])
    assert result.ok
    assert result.value == 4.0


def test_tolerance_context():
    f = lambda x: x * x  # noqa: E731
    assert not check_grad(f, [2.0], [4.01]).ok

    with localcontext(rtol=1e-2):
        assert getcontext().rtol == 1e-2
        assert check_grad(f, [2.0], [4.01]).ok

    assert getcontext().rtol == 1e-5
    assert check_grad(f, [2.0], [4.01], rtol=1e-2).ok


def test_setcontext_is_local_to_context():
    def run():
        setcontext(Context(rtol=0.5, atol=0.0))
        return getcontext().rtol

    assert contextvars.copy_context().run(run) == 0.5
    assert getcontext().rtol == 1e-5


def test_context_validation():
    with pytest.raises(ValueError):
        Context(rtol=-1.0)

    ctx = Context(1e-3, 1e-6)
    assert ctx.copy().rtol == 1e-3
    assert repr(ctx) == "Context(rtol=0.001, atol=1e-06)"
