from __future__ import annotations

import importlib.util
import unittest


JAX_AVAILABLE = importlib.util.find_spec("jax") is not None


@unittest.skipUnless(JAX_AVAILABLE, "jax is required for value-model tests")
class ValueModelTests(unittest.TestCase):
    def test_runtime_type_of_scalars_and_arrays(self) -> None:
        from forklang import runtime_type
        from forklang.types import FLOAT, INT, ArrayType

        self.assertEqual(runtime_type(3), INT)
        self.assertEqual(runtime_type(3.5), FLOAT)
        self.assertEqual(runtime_type([1, 2]), ArrayType(INT))
        self.assertEqual(runtime_type([1.5, 2.0]), ArrayType(FLOAT))
        self.assertEqual(runtime_type([[1], [2]]), ArrayType(ArrayType(INT)))

    def test_runtime_type_rejects_unsupported_shapes(self) -> None:
        from forklang import InvariantViolation, runtime_type

        for value in ([], "text", None, {"x": 1}, ["a"], True):
            with self.subTest(value=value):
                with self.assertRaises(InvariantViolation):
                    runtime_type(value)

    def test_wrap_int_is_twos_complement(self) -> None:
        from forklang.values import INT64_MAX, INT64_MIN, wrap_int

        self.assertEqual(wrap_int(INT64_MAX + 1), INT64_MIN)
        self.assertEqual(wrap_int(INT64_MIN - 1), INT64_MAX)
        self.assertEqual(wrap_int(-5), -5)
        self.assertEqual(wrap_int(1 << 64), 0)

    def test_display_strings(self) -> None:
        from forklang import ast, to_display_string
        from forklang.values import Builtin, StructConstructor

        point = ast.StructDeclaration("Point", (ast.FieldDeclaration("x"), ast.FieldDeclaration("y")))
        fun = ast.FunDeclaration("f", (), ast.Block(()))

        self.assertEqual(to_display_string(None), "null")
        self.assertEqual(to_display_string([1, [2.5, None], "s"]), "[1, [2.5, null], s]")
        self.assertEqual(to_display_string({"x": 1, "y": [2]}), "{x=1, y=[2]}")
        self.assertEqual(to_display_string(point), "Point")
        self.assertEqual(to_display_string(StructConstructor(point)), "$Point")
        self.assertEqual(to_display_string(fun), "f")
        self.assertEqual(to_display_string(Builtin("print", print)), "print")
        self.assertEqual(to_display_string(2.0), "2.0")

    def test_literal_round_trip_matches_declared_type(self) -> None:
        from forklang import Interpreter
        from tree_builders import TreeBuilder

        b = TreeBuilder()
        interp = Interpreter(b.types)
        env = interp.root_environment()

        cases = [
            (b.int(7), int, 7),
            (b.float(2.5), float, 2.5),
            (b.string("hi"), str, "hi"),
            (b.null(), type(None), None),
            (b.ints(1, 2), list, [1, 2]),
            (b.floats(1.0, 2.0), list, [1.0, 2.0]),
        ]
        for node, kind, expected in cases:
            with self.subTest(node=node.contents()):
                out = interp.evaluate(node, env)
                self.assertIs(type(out), kind)
                self.assertEqual(out, expected)

    def test_float_array_literal_widens_int_elements(self) -> None:
        from forklang import Interpreter
        from forklang.types import FLOAT
        from tree_builders import TreeBuilder

        b = TreeBuilder()
        interp = Interpreter(b.types)
        out = interp.evaluate(b.array([b.int(1), b.float(2.5)], FLOAT), interp.root_environment())
        self.assertEqual(out, [1.0, 2.5])
        self.assertIsInstance(out[0], float)

    def test_int_literal_wraps_to_64_bits(self) -> None:
        from forklang import Interpreter
        from forklang.values import INT64_MIN
        from tree_builders import TreeBuilder

        b = TreeBuilder()
        interp = Interpreter(b.types)
        self.assertEqual(interp.evaluate(b.int(1 << 63), interp.root_environment()), INT64_MIN)

    def test_type_table_reports_missing_annotation(self) -> None:
        from forklang import InvariantViolation, TypeTable
        from forklang.ast import IntLiteral

        table = TypeTable()
        with self.assertRaises(InvariantViolation):
            table.type_of(IntLiteral(1))


if __name__ == "__main__":
    unittest.main()
