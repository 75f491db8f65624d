"""
Command-line driver for Kaleidoscope.

Without arguments this is the classic 'ready>' loop: every line typed is
parsed and lowered into one long-lived module, and the IR of each form is
printed. With a file argument the whole file is compiled instead.

Author: xwest
"""

import argparse
import logging
import sys
from typing import Optional, List, TextIO

from .lexer import Lexer, LexerError
from .lexer.errors import ERROR_CODES
from .parser import Parser, ParseError, FunctionDef, parse_file, dump
from .parser.errors import PARSER_ERROR_CODES
from .backend import LLVMBackend
from .codegen import Codegen, CodegenError
from .codegen.errors import CODEGEN_ERROR_CODES

logger = logging.getLogger(__name__)

PROMPT = "ready> "


def explain_error_code(code: str) -> Optional[str]:
    """Short description of a diagnostic code such as 'P001', or None."""
    code = code.upper()
    for table in (ERROR_CODES, PARSER_ERROR_CODES, CODEGEN_ERROR_CODES):
        if code in table:
            return table[code]
    return None


class Session:
    """
    One compilation session: a backend, the codegen bound to it, and the
    streams diagnostics and IR are written to.
    """

    def __init__(self, backend: LLVMBackend, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.backend = backend
        self.codegen = Codegen(backend)
        self.out = out or sys.stdout
        self.err = err or sys.stderr

    def run_source(self, source: str, filename: str = "<stdin>") -> bool:
        """
        Parse and lower every form in `source`, printing each one's IR.

        The first error is reported and ends processing of `source`; forms
        lowered before it stay in the module.

        Returns:
            True if every form was lowered
        """
        parser = Parser(Lexer(source, filename))

        try:
            while True:
                node = parser.parse_top_level()
                if node is None:
                    return True
                self._handle(node)
        except (LexerError, ParseError, CodegenError) as e:
            self.err.write(str(e))
            self.err.flush()
            return False

    def _handle(self, node):
        function = self.codegen.lower_top_level(node)

        if not isinstance(node, FunctionDef):
            heading = "Read extern:"
        elif node.is_anonymous:
            heading = "Read top-level expression:"
        else:
            heading = "Read function definition:"

        self.out.write(f"{heading}\n{self.backend.render_function(function)}\n")
        self.out.flush()

    def repl(self, stream: TextIO) -> bool:
        """Read-eval-print loop over `stream`, one line at a time, until EOF."""
        ok = True
        while True:
            self.err.write(PROMPT)
            self.err.flush()

            line = stream.readline()
            if not line:
                self.err.write("\n")
                return ok

            ok = self.run_source(line) and ok

    def run_file(self, path: str) -> bool:
        with open(path, 'r', encoding='utf-8') as f:
            source = f.read()
        return self.run_source(source, path)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kaleidoscope",
        description="Kaleidoscope front end: parse source and print LLVM IR",
    )
    parser.add_argument("file", nargs="?",
                        help="Source file to compile (interactive prompt if omitted)")
    parser.add_argument("--emit-module", action="store_true",
                        help="Print the whole module when done")
    parser.add_argument("--verify", action="store_true",
                        help="Verify the module with LLVM when done")
    parser.add_argument("--dump-ast", action="store_true",
                        help="Parse the file and print its AST instead of compiling it")
    parser.add_argument("--explain", metavar="CODE",
                        help="Describe a diagnostic code (e.g. P001) and exit")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.explain:
        description = explain_error_code(args.explain)
        if description is None:
            print(f"ERROR: unknown diagnostic code '{args.explain}'", file=sys.stderr)
            return 1
        print(f"{args.explain.upper()}: {description}")
        return 0

    if args.dump_ast:
        if not args.file:
            arg_parser.error("--dump-ast requires a file")
        try:
            program = parse_file(args.file)
        except (LexerError, ParseError) as e:
            sys.stderr.write(str(e))
            return 1
        print(dump(program))
        return 0

    backend = LLVMBackend()
    session = Session(backend)

    if args.file:
        ok = session.run_file(args.file)
    else:
        ok = session.repl(sys.stdin)

    if args.emit_module:
        print(backend.render_module())

    if args.verify:
        try:
            backend.verify()
        except RuntimeError as e:
            print(f"ERROR: module verification failed: {e}", file=sys.stderr)
            ok = False
        else:
            logger.debug("module verified")

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
