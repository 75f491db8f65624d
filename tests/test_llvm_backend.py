"""
Test suite for the llvmlite backend session.

Author: xwest
"""

import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.backend import LLVMBackend, BINARY_OP_KINDS


class TestLLVMBackend(unittest.TestCase):
    """Test cases for IR construction through LLVMBackend."""

    def setUp(self):
        self.backend = LLVMBackend()

    def test_constant_is_double(self):
        value = self.backend.constant(2)
        self.assertEqual(str(value.type), "double")
        self.assertTrue(self.backend.render_value(value).startswith("double "))

    def test_declare_function(self):
        function = self.backend.declare_function("foo", ["x"])
        self.assertIn('declare double @"foo"(double %"x")', self.backend.render_function(function))
        self.assertIs(self.backend.lookup_function("foo"), function)
        self.assertFalse(self.backend.has_body(function))

    def test_declare_existing_renames_arguments(self):
        first = self.backend.declare_function("foo", ["x", "y"])
        second = self.backend.declare_function("foo", ["a", "b"])
        self.assertIs(first, second)
        self.assertEqual([arg.name for arg in second.args], ["a", "b"])

        self.backend.declare_function("foo", ["b", "a"])
        self.assertEqual([arg.name for arg in first.args], ["b", "a"])
        self.assertIn('(double %"b", double %"a")', self.backend.render_function(first))

    def test_declare_existing_restores_earlier_name(self):
        function = self.backend.declare_function("bar", ["a"])
        self.backend.declare_function("bar", ["b"])
        self.backend.declare_function("bar", ["a"])
        self.assertEqual([arg.name for arg in function.args], ["a"])

    def test_defined_function_keeps_argument_names(self):
        function = self.backend.declare_function("f", ["x"])
        self.backend.attach_body(function)
        self.backend.set_return(self.backend.function_parameters(function)[0])
        self.backend.declare_function("f", ["y"])
        self.assertEqual([arg.name for arg in function.args], ["x"])

    def test_anonymous_names_are_unique(self):
        first = self.backend.declare_function("", [])
        second = self.backend.declare_function("", [])
        self.assertEqual(first.name, "__anon_expr")
        self.assertNotEqual(first.name, second.name)
        self.assertIsNone(self.backend.lookup_function(""))

    def test_lookup_missing(self):
        self.assertIsNone(self.backend.lookup_function("nope"))

    def test_build_body(self):
        function = self.backend.declare_function("f", ["a", "b"])
        self.backend.attach_body(function)
        a, b = self.backend.function_parameters(function)

        results = [self.backend.binary_op(kind, a, b) for kind in BINARY_OP_KINDS]
        total = self.backend.call(function, results[:2])
        self.backend.set_return(total)

        self.assertTrue(self.backend.has_body(function))
        self.assertEqual(self.backend.ctx.current_function, function)
        text = self.backend.render_function(function)
        for opcode in ("fadd", "fsub", "fmul", "fcmp olt", "uitofp", "call", "ret"):
            self.assertIn(opcode, text)

    def test_unknown_binary_op(self):
        function = self.backend.declare_function("f", ["a"])
        self.backend.attach_body(function)
        a = self.backend.function_parameters(function)[0]
        with self.assertRaises(ValueError):
            self.backend.binary_op("div", a, a)

    def test_discard_body(self):
        function = self.backend.declare_function("f", [])
        self.backend.attach_body(function)
        self.backend.set_return(self.backend.constant(1.0))
        self.assertTrue(self.backend.has_body(function))

        self.backend.discard_body(function)
        self.assertFalse(self.backend.has_body(function))
        self.assertIsNone(self.backend.ctx.current_function)
        self.assertIn("declare", self.backend.render_function(function))

    def test_reset(self):
        self.backend.declare_function("foo", [])
        old_module = self.backend.module
        self.backend.reset()
        self.assertIsNot(self.backend.module, old_module)
        self.assertIsNone(self.backend.lookup_function("foo"))
        self.assertEqual(list(self.backend.module.functions), [])

    def test_module_name(self):
        backend = LLVMBackend("unit")
        self.assertIn('"unit"', backend.render_module())


if __name__ == "__main__":
    unittest.main()
