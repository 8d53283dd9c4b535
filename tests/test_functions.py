"""
Test the external function registry.
"""

import math

import pytest

from pcdistance.analysis.functions import FunctionRegistry, default_registry
from pcdistance.core.errors import UnsupportedExpressionError


class TestLookup:
    """Test function id resolution."""

    def test_candidates_for_engine_signature(self):
        registry = FunctionRegistry()
        assert registry.candidates("java/lang/Math:(D)D:sqrt") == [
            "java/lang/Math:(D)D:sqrt",
            "java.lang.Math.sqrt",
            "sqrt",
        ]

    def test_candidates_for_dotted_name(self):
        assert FunctionRegistry().candidates("math.sqrt") == ["math.sqrt", "sqrt"]

    @pytest.mark.parametrize("name", ["sqrt", "math.sqrt", "java/lang/Math:(D)D:sqrt"])
    def test_default_resolves(self, name):
        assert default_registry().resolve(name)(16.0) == 4.0

    def test_exact_id_wins(self):
        registry = FunctionRegistry({"abs": abs})
        registry.register("java.lang.StrictMath.abs", lambda v: -1)
        assert registry.resolve("java/lang/StrictMath:(D)D:abs")(5) == -1
        assert registry.resolve("java/lang/Math:(D)D:abs")(-5) == 5

    def test_unknown(self):
        with pytest.raises(UnsupportedExpressionError):
            default_registry().resolve("nosuch")
        assert "nosuch" not in default_registry()
        assert "sin" in default_registry()

    def test_copy_is_independent(self):
        registry = default_registry().copy()
        registry.register("twice", lambda v: 2 * v)
        assert registry.unregister("sqrt")
        assert "twice" not in default_registry()
        assert "sqrt" in default_registry()
        assert not registry.unregister("sqrt")


class TestMathFunctions:
    """Test IEEE-style behavior of the default functions."""

    def test_domain_errors_are_nan(self):
        registry = default_registry()
        assert math.isnan(registry.resolve("sqrt")(-1.0))
        assert math.isnan(registry.resolve("asin")(2.0))
        assert math.isnan(registry.resolve("log")(-1.0))

    def test_log_of_zero(self):
        assert default_registry().resolve("log")(0.0) == -math.inf

    def test_overflow_is_infinite(self):
        assert default_registry().resolve("exp")(1000.0) == math.inf
        assert default_registry().resolve("pow")(10.0, 400.0) == math.inf

    def test_signum_and_rint(self):
        registry = default_registry()
        assert registry.resolve("signum")(-2.5) == -1.0
        assert registry.resolve("signum")(0.0) == 0.0
        assert registry.resolve("rint")(2.5) == 2.0
        assert registry.resolve("rint")(3.5) == 4.0

    def test_cbrt_of_negative(self):
        assert default_registry().resolve("cbrt")(-27.0) == pytest.approx(-3.0)


class TestSmtFunctions:
    """Test the SMT-LIB Int operations."""

    @pytest.mark.parametrize(
        "a, b, quotient, remainder",
        [(7, 2, 3, 1), (-7, 2, -4, 1), (7, -2, -3, 1), (-7, -2, 4, 1)],
    )
    def test_euclidean_division(self, a, b, quotient, remainder):
        registry = default_registry()
        assert registry.resolve("smt.div")(a, b) == quotient
        assert registry.resolve("smt.mod")(a, b) == remainder
        assert a == b * quotient + remainder

    def test_zero_divisor(self):
        assert math.isnan(default_registry().resolve("smt.div")(3, 0))
        assert math.isnan(default_registry().resolve("smt.mod")(3, 0))

    def test_to_int_is_floor(self):
        to_int = default_registry().resolve("smt.to_int")
        assert to_int(-1.5) == -2
        assert to_int(1.5) == 1
        assert math.isnan(to_int(math.inf))

    def test_unbounded(self):
        assert default_registry().resolve("smt.mul")(2**40, 2**40) == 2**80
