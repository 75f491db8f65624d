"""
Test suite for the command-line driver.

Author: xwest
"""

import unittest
import sys
import os
import io
import tempfile
from contextlib import redirect_stdout, redirect_stderr

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from kaleidoscope.backend import LLVMBackend
from kaleidoscope.cli import Session, PROMPT, main


class TestSession(unittest.TestCase):
    """Test cases for one compilation session."""

    def setUp(self):
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.session = Session(LLVMBackend(), self.out, self.err)

    def test_run_source_headings(self):
        ok = self.session.run_source("extern sin(x); def f(a) sin(a); f(1)")
        self.assertTrue(ok)
        output = self.out.getvalue()
        self.assertIn("Read extern:\ndeclare double @\"sin\"", output)
        self.assertIn("Read function definition:\ndefine double @\"f\"", output)
        self.assertIn("Read top-level expression:\ndefine double @\"__anon_expr\"", output)
        self.assertEqual(self.err.getvalue(), "")

    def test_parse_error_reported(self):
        ok = self.session.run_source("def (a) a")
        self.assertFalse(ok)
        self.assertIn("ERROR:", self.err.getvalue())
        self.assertIn("Expected identifier", self.err.getvalue())

    def test_lex_error_reported(self):
        self.assertFalse(self.session.run_source("1 / 2"))
        self.assertIn("Invalid character", self.err.getvalue())

    def test_codegen_error_keeps_earlier_forms(self):
        ok = self.session.run_source("def f(a) a\ndef g(a) b\ndef h(a) a")
        self.assertFalse(ok)
        self.assertIn("Unknown variable name: 'b'", self.err.getvalue())
        self.assertIsNotNone(self.session.backend.lookup_function("f"))
        self.assertIsNone(self.session.backend.lookup_function("g"))
        self.assertIsNone(self.session.backend.lookup_function("h"))

    def test_repl(self):
        stream = io.StringIO("def f(a) a * 2\nf(\nf(3)\n")
        ok = self.session.repl(stream)
        self.assertFalse(ok)
        self.assertEqual(self.err.getvalue().count(PROMPT), 4)
        self.assertIn("Read function definition:", self.out.getvalue())
        self.assertIn('call double @"f"', self.out.getvalue())

    def test_long_chain_then_next_line(self):
        self.assertTrue(self.session.run_source("1" + " + 1" * 2000))
        self.assertTrue(self.session.run_source("def f(a) a"))
        self.assertIsNotNone(self.session.backend.lookup_function("f"))
        self.assertEqual(self.err.getvalue(), "")

    def test_deep_nesting_reported_then_next_line(self):
        ok = self.session.run_source("(" * 5000 + "1" + ")" * 5000)
        self.assertFalse(ok)
        self.assertIn("Expression nested too deeply", self.err.getvalue())

        self.assertTrue(self.session.run_source("def f(a) a * 2"))
        self.assertTrue(self.session.backend.has_body(self.session.backend.lookup_function("f")))

    def test_repl_empty_input(self):
        self.assertTrue(self.session.repl(io.StringIO("")))
        self.assertEqual(self.out.getvalue(), "")


class TestMain(unittest.TestCase):
    """Test cases for the console entry point."""

    def write_source(self, text):
        fd, path = tempfile.mkstemp(suffix=".k")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        self.addCleanup(os.remove, path)
        return path

    def run_main(self, argv):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            status = main(argv)
        return status, out.getvalue(), err.getvalue()

    def test_compile_file(self):
        path = self.write_source("# demo\ndef sq(x) x * x\nsq(4)\n")
        status, out, err = self.run_main([path, "--emit-module"])
        self.assertEqual(status, 0)
        self.assertIn("Read function definition:", out)
        self.assertIn('; ModuleID = "my cool jit"', out)
        self.assertEqual(err, "")

    def test_dump_ast(self):
        path = self.write_source("def f(a b) a + b * 2\nf(1, 2)\n")
        status, out, err = self.run_main([path, "--dump-ast"])
        self.assertEqual(status, 0)
        self.assertEqual(out.splitlines(), [
            "Function(Prototype(f, [a, b]), Binary(+, Variable(a), Binary(*, Variable(b), Number(2))))",
            "Function(Prototype(, []), Call(f, [Number(1), Number(2)]))",
        ])
        self.assertNotIn("define", out)

    def test_dump_ast_with_syntax_error(self):
        path = self.write_source("def f(a, b) a\n")
        status, out, err = self.run_main([path, "--dump-ast"])
        self.assertEqual(status, 1)
        self.assertIn("Expected ')'", err)

    def test_explain(self):
        for code, text in (("L003", "Invalid numeric literal"),
                           ("p011", "Expression nested too deeply"),
                           ("C005", "Function redefinition")):
            status, out, err = self.run_main(["--explain", code])
            self.assertEqual(status, 0)
            self.assertEqual(out.strip(), f"{code.upper()}: {text}")

    def test_explain_unknown_code(self):
        status, out, err = self.run_main(["--explain", "X999"])
        self.assertEqual(status, 1)
        self.assertIn("unknown diagnostic code", err)

    def test_compile_file_with_error(self):
        path = self.write_source("def f(a) g(a)\n")
        status, out, err = self.run_main([path])
        self.assertEqual(status, 1)
        self.assertIn("Unknown function referenced: 'g'", err)
        self.assertIn(path, err)


if __name__ == "__main__":
    unittest.main()
