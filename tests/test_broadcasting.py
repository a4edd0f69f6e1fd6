from __future__ import annotations

import importlib.util
import math
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for broadcasting tests")
class BroadcastingTests(unittest.TestCase):
    def setUp(self) -> None:
        from forklang import apply_diadic
        from forklang.ast import DiadicOperator
        from forklang.types import FLOAT, INT, ArrayType

        self.apply = apply_diadic
        self.op = DiadicOperator
        self.INT = INT
        self.FLOAT = FLOAT
        self.INTS = ArrayType(INT)
        self.FLOATS = ArrayType(FLOAT)

    def test_int_addition_wraps_at_64_bits(self) -> None:
        from forklang.values import INT64_MAX, INT64_MIN

        out = self.apply(self.op.ADD, self.INT, self.INT, INT64_MAX, 1)
        self.assertEqual(out, INT64_MIN)
        self.assertEqual(self.apply(self.op.ADD, self.INT, self.INT, 40, 2), 42)
        self.assertEqual(self.apply(self.op.MULTIPLY, self.INT, self.INT, INT64_MIN, -1), INT64_MIN)

    def test_float_poisons_the_expression(self) -> None:
        out = self.apply(self.op.ADD, self.INT, self.FLOAT, 2, 3.0)
        self.assertIsInstance(out, float)
        self.assertEqual(out, 5.0)

        arr = self.apply(self.op.MULTIPLY, self.INTS, self.FLOAT, [1, 2], 0.5)
        self.assertEqual(arr, [0.5, 1.0])
        self.assertTrue(all(isinstance(item, float) for item in arr))

    def test_scalar_array_broadcasting(self) -> None:
        self.assertEqual(self.apply(self.op.ADD, self.INT, self.INTS, 1, [1, 2, 3]), [2, 3, 4])
        self.assertEqual(self.apply(self.op.SUBTRACT, self.INTS, self.INT, [1, 2, 3], 1), [0, 1, 2])
        self.assertEqual(self.apply(self.op.SUBTRACT, self.INT, self.INTS, 10, [1, 2, 3]), [9, 8, 7])
        self.assertEqual(self.apply(self.op.MULTIPLY, self.INTS, self.INTS, [1, 2, 3], [4, 5, 6]), [4, 10, 18])

    def test_broadcasting_returns_a_new_list(self) -> None:
        left = [1, 2, 3]
        out = self.apply(self.op.ADD, self.INTS, self.INT, left, 0)
        self.assertEqual(out, left)
        self.assertIsNot(out, left)

    def test_array_length_mismatch(self) -> None:
        from forklang import LengthMismatchError

        with self.assertRaises(LengthMismatchError):
            self.apply(self.op.ADD, self.INTS, self.INTS, [1], [1, 2])

    def test_empty_array_broadcasts_to_empty(self) -> None:
        self.assertEqual(self.apply(self.op.ADD, self.INTS, self.INT, [], 4), [])

    def test_concat_layouts(self) -> None:
        self.assertEqual(self.apply(self.op.CONCAT, self.INT, self.INT, 6, 2), [6, 2])
        self.assertEqual(
            self.apply(self.op.CONCAT, self.INTS, self.INTS, [4, 3, 2], [1, 2, 3]),
            [4, 3, 2, 1, 2, 3],
        )
        self.assertEqual(self.apply(self.op.CONCAT, self.INT, self.INTS, 0, [1, 2]), [0, 1, 2])
        self.assertEqual(self.apply(self.op.CONCAT, self.INTS, self.INT, [1, 2], 3), [1, 2, 3])

    def test_concat_widens_when_float_is_involved(self) -> None:
        out = self.apply(self.op.CONCAT, self.INTS, self.FLOAT, [1, 2], 3.5)
        self.assertEqual(out, [1.0, 2.0, 3.5])
        self.assertIsInstance(out[0], float)

    def test_concat_never_aliases_operands(self) -> None:
        left = [1, 2]
        out = self.apply(self.op.CONCAT, self.INTS, self.INTS, left, [])
        out.append(9)
        self.assertEqual(left, [1, 2])

    def test_string_concatenation(self) -> None:
        from forklang.types import NULL, STRING

        self.assertEqual(self.apply(self.op.ADD, STRING, STRING, "ab", "cd"), "abcd")
        self.assertEqual(self.apply(self.op.ADD, STRING, self.INT, "n=", 3), "n=3")
        self.assertEqual(self.apply(self.op.ADD, self.INTS, STRING, [1, 2], "!"), "[1, 2]!")
        self.assertEqual(self.apply(self.op.ADD, STRING, NULL, "x", None), "xnull")

    def test_truncating_integer_division_and_remainder(self) -> None:
        self.assertEqual(self.apply(self.op.DIVIDE, self.INT, self.INT, -7, 2), -3)
        self.assertEqual(self.apply(self.op.REMAINDER, self.INT, self.INT, -7, 2), -1)
        self.assertEqual(self.apply(self.op.REMAINDER, self.INT, self.INT, 7, -2), 1)
        self.assertEqual(self.apply(self.op.DIVIDE, self.INTS, self.INT, [7, -7], 2), [3, -3])
        self.assertAlmostEqual(self.apply(self.op.REMAINDER, self.FLOAT, self.FLOAT, -7.5, 2.0), -1.5)

    def test_integer_division_by_zero_raises(self) -> None:
        from forklang import DivisionByZeroError

        with self.assertRaises(DivisionByZeroError):
            self.apply(self.op.DIVIDE, self.INT, self.INT, 1, 0)
        with self.assertRaises(DivisionByZeroError):
            self.apply(self.op.REMAINDER, self.INTS, self.INTS, [1, 2], [1, 0])

    def test_float_division_by_zero_follows_ieee(self) -> None:
        out = self.apply(self.op.DIVIDE, self.FLOAT, self.FLOAT, 1.0, 0.0)
        self.assertTrue(math.isinf(out))
        self.assertTrue(math.isnan(self.apply(self.op.REMAINDER, self.FLOAT, self.INT, 1.0, 0)))

    def test_relational_operators_encode_booleans_numerically(self) -> None:
        cases = [
            (self.op.GREATER, 3, 2, 1),
            (self.op.LOWER, 3, 2, 0),
            (self.op.GREATER_EQUAL, 2, 2, 1),
            (self.op.LOWER_EQUAL, 3, 2, 0),
            (self.op.EQUALITY, 4, 4, 1),
            (self.op.NOT_EQUALS, 4, 4, 0),
        ]
        for op, left, right, expected in cases:
            with self.subTest(op=op.name):
                out = self.apply(op, self.INT, self.INT, left, right)
                self.assertEqual(out, expected)
                self.assertIsInstance(out, int)

        floating = self.apply(self.op.GREATER, self.FLOAT, self.INT, 3.0, 2)
        self.assertIsInstance(floating, float)
        self.assertEqual(floating, 1.0)
        self.assertEqual(self.apply(self.op.EQUALITY, self.INTS, self.INTS, [1, 2, 3], [1, 5, 3]), [1, 0, 1])

    def test_logical_operators_are_numeric(self) -> None:
        self.assertEqual(self.apply(self.op.AND, self.INT, self.INT, 2, 5), 1)
        self.assertEqual(self.apply(self.op.AND, self.INT, self.INT, 2, 0), 0)
        self.assertEqual(self.apply(self.op.OR, self.INT, self.INT, 0, 0), 0)
        self.assertEqual(self.apply(self.op.OR, self.FLOAT, self.FLOAT, 0.0, 3.0), 1.0)
        self.assertEqual(self.apply(self.op.AND, self.INTS, self.INTS, [1, 0, 3], [2, 2, 0]), [1, 0, 0])
        self.assertEqual(self.apply(self.op.OR, self.INTS, self.INT, [0, 4], 0), [0, 1])

    def test_exponent(self) -> None:
        from forklang import DivisionByZeroError
        from forklang.values import INT64_MIN

        self.assertEqual(self.apply(self.op.EXPONENT, self.INT, self.INT, 2, 10), 1024)
        self.assertEqual(self.apply(self.op.EXPONENT, self.INT, self.INT, 2, 63), INT64_MIN)
        self.assertEqual(self.apply(self.op.EXPONENT, self.INT, self.INT, 2, 64), 0)
        self.assertEqual(self.apply(self.op.EXPONENT, self.INT, self.INT, 2, -1), 0)
        self.assertEqual(self.apply(self.op.EXPONENT, self.INT, self.INT, -1, -3), -1)
        self.assertEqual(self.apply(self.op.EXPONENT, self.INTS, self.INT, [1, 2, 3], 2), [1, 4, 9])
        self.assertAlmostEqual(self.apply(self.op.EXPONENT, self.FLOAT, self.FLOAT, 2.0, 0.5), math.sqrt(2.0))
        with self.assertRaises(DivisionByZeroError):
            self.apply(self.op.EXPONENT, self.INT, self.INT, 0, -1)

    def test_equality_fallback_for_non_numeric_types(self) -> None:
        from forklang.types import NULL, STRING, StructType

        point = StructType("Point")
        a = {"x": 1}
        b = {"x": 1}
        self.assertEqual(self.apply(self.op.EQUALITY, STRING, STRING, "a", "a"), 1)
        self.assertEqual(self.apply(self.op.NOT_EQUALS, STRING, STRING, "a", "b"), 1)
        self.assertEqual(self.apply(self.op.EQUALITY, point, point, a, a), 1)
        self.assertEqual(self.apply(self.op.EQUALITY, point, point, a, b), 0)
        self.assertEqual(self.apply(self.op.EQUALITY, point, NULL, a, None), 0)
        self.assertEqual(self.apply(self.op.EQUALITY, NULL, NULL, None, None), 1)

    def test_unsupported_combinations_are_invariant_violations(self) -> None:
        from forklang import InvariantViolation
        from forklang.types import STRING, ArrayType

        with self.assertRaises(InvariantViolation):
            self.apply(self.op.SUBTRACT, STRING, STRING, "a", "b")
        with self.assertRaises(InvariantViolation):
            self.apply(self.op.ADD, ArrayType(STRING), self.INT, ["a"], 1)


if __name__ == "__main__":
    unittest.main()
