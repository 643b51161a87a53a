"""
Tests for the serqlane command line host.
"""

import io
import unittest
import tempfile
from contextlib import redirect_stdout, redirect_stderr
from unittest import mock
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from serqlane.cli import main, format_token, EXIT_OK, EXIT_ERRORS, EXIT_USAGE
from serqlane.lexer.lexer import Lexer


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmpdir.cleanup)
        # Keep the caller's SERQLANE_* settings out of the tests.
        patcher = mock.patch.dict(os.environ, {
            k: v for k, v in os.environ.items() if not k.startswith("SERQLANE_")
        }, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def write(self, text, name="main.sq"):
        path = os.path.join(self._tmpdir.name, name)
        with open(path, "wb") as f:
            f.write(text.encode("utf-8"))
        return path

    def run_main(self, argv, stdin=None):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            if stdin is None:
                code = main(argv)
            else:
                with mock.patch("sys.stdin", io.StringIO(stdin)):
                    code = main(argv)
        return code, out.getvalue(), err.getvalue()


class TestTokens(CLITestCase):

    def test_format_token(self):
        source = "fn main"
        tokens = Lexer(source).tokenize()
        self.assertEqual(format_token(tokens[0], source), '1:1: FN ("fn")')
        self.assertEqual(format_token(tokens[1], source), '1:4: IDENTIFIER ("main")')

    def test_tokens(self):
        path = self.write("fn main() {}\n")
        code, out, err = self.run_main(["tokens", path])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(out.splitlines(), [
            '1:1: FN ("fn")',
            '1:4: IDENTIFIER ("main")',
            '1:8: LEFT_PAREN ("(")',
            '1:9: RIGHT_PAREN (")")',
            '1:11: LEFT_BRACE ("{")',
            '1:12: RIGHT_BRACE ("}")',
            '1:13: SEMICOLON ("")',
            '2:1: EOF ("")',
        ])
        self.assertEqual(err, "")

    def test_tokens_with_errors(self):
        path = self.write("a $ b")
        code, out, err = self.run_main(["tokens", path])
        self.assertEqual(code, EXIT_ERRORS)
        self.assertIn('1:3: ERROR ("$")', out)
        self.assertIn("error[L001]: unrecognized character '$'", err)
        self.assertIn(f"{path}:1:3", err)

    def test_keep_comments_flag(self):
        path = self.write("x // note")
        code, out, _ = self.run_main(["--keep-comments", "tokens", path])
        self.assertEqual(code, EXIT_OK)
        self.assertIn('1:3: COMMENT ("// note")', out)

    def test_keep_comments_from_environment(self):
        path = self.write("x // note")
        with mock.patch.dict(os.environ, {"SERQLANE_KEEP_COMMENTS": "1"}):
            code, out, _ = self.run_main(["tokens", path])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("COMMENT", out)

    def test_missing_file(self):
        code, _, err = self.run_main(["tokens", os.path.join(self._tmpdir.name, "nope.sq")])
        self.assertEqual(code, EXIT_USAGE)
        self.assertTrue(err.startswith("serqlane: "))

    def test_invalid_utf8(self):
        path = os.path.join(self._tmpdir.name, "bad.sq")
        with open(path, "wb") as f:
            f.write(b"fn \xff")
        code, _, err = self.run_main(["tokens", path])
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("UTF-8", err)


class TestParse(CLITestCase):

    def test_parse(self):
        path = self.write("fn add(a: i32, b: i32): i32 {\n    a + b\n}\nfn main() {}\n")
        code, out, err = self.run_main(["parse", path])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(out.splitlines(), [
            "(fn add ((a i32) (b i32)) i32 (block (+ a b)))",
            "(fn main () (block))",
        ])
        self.assertEqual(err, "")

    def test_parse_errors(self):
        path = self.write("fn f() {\n    1 2\n}\n")
        code, out, err = self.run_main(["parse", path])
        self.assertEqual(code, EXIT_ERRORS)
        self.assertEqual(out.splitlines(), ["(fn f () (block 1))"])
        self.assertIn("error[P001]: expected ';', found number", err)
        self.assertIn(f"{path}:2:7", err)

    def test_integer_bits_flag(self):
        path = self.write("fn f() { 256 }")
        self.assertEqual(self.run_main(["parse", path])[0], EXIT_OK)
        code, _, err = self.run_main(["--integer-bits", "8", "parse", path])
        self.assertEqual(code, EXIT_ERRORS)
        self.assertIn("error[P003]", err)

    def test_invalid_option_value(self):
        path = self.write("fn f() {}")
        code, _, err = self.run_main(["--integer-bits", "0", "parse", path])
        self.assertEqual(code, EXIT_USAGE)
        self.assertIn("integer_bits", err)

    def test_trailing_comma_flag(self):
        path = self.write("fn f() { g(1,) }")
        self.assertEqual(self.run_main(["parse", path])[0], EXIT_ERRORS)
        code, out, _ = self.run_main(["--allow-trailing-comma", "parse", path])
        self.assertEqual(code, EXIT_OK)
        self.assertIn("(call g 1)", out)

    def test_stdin(self):
        stdin = mock.Mock()
        stdin.buffer = io.BytesIO(b"fn main() { 1 }")
        with mock.patch("sys.stdin", stdin):
            code, out, _ = self.run_main(["parse", "-"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(out.strip(), "(fn main () (block 1))")


class TestRepl(CLITestCase):

    def test_tokenize_lines(self):
        code, out, _ = self.run_main(["repl"], stdin="x\n")
        self.assertEqual(code, EXIT_OK)
        self.assertIn('1:1: IDENTIFIER ("x")', out)
        self.assertTrue(out.startswith("> "))

    def test_parse_lines(self):
        code, out, _ = self.run_main(["repl", "--parse"], stdin="fn f() { 1 }\nfn g() {}\n")
        self.assertEqual(code, EXIT_OK)
        self.assertIn("(fn f () (block 1))", out)
        self.assertIn("(fn g () (block))", out)

    def test_errors_set_the_exit_status(self):
        code, _, err = self.run_main(["repl"], stdin="$\nx\n")
        self.assertEqual(code, EXIT_ERRORS)
        self.assertIn("<repl>:1:1", err)


class TestArguments(unittest.TestCase):

    def test_command_is_required(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as cm:
                main([])
        self.assertEqual(cm.exception.code, 2)

    def test_version(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(SystemExit) as cm:
                main(["--version"])
        self.assertEqual(cm.exception.code, 0)
        self.assertIn("serqlane", out.getvalue())


if __name__ == '__main__':
    unittest.main()
