import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

import main
from core.config import AppConfig


class TestCli(unittest.TestCase):
    """Runs the CLI end to end against a JSON store in a temp directory."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = self.temp_dir.name
        self.store_args = ["--store", "json", "--store-path", os.path.join(self.root, "store.json")]

        self.form_path = os.path.join(self.root, "form.json")
        with open(self.form_path, "w", encoding="utf-8") as f:
            json.dump({
                "contactInfo": {"email": "ann@example.com"},
                "summary": "Built X",
                "experience": [{"title": "Engineer", "company": "Acme"}],
            }, f)

        patcher = patch("main.AppConfig.from_env", return_value=AppConfig())
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.temp_dir.cleanup()

    def run_cli(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main.main(self.store_args + list(argv))
        return code, out.getvalue()

    def test_assemble(self):
        code, out = self.run_cli("assemble", "--form", self.form_path, "--name", "Ann")

        self.assertEqual(code, 0)
        self.assertIn('## <div align="center">Ann</div>', out)
        self.assertIn("### Engineer @ Acme", out)

    def test_save_then_load(self):
        self.assertEqual(self.run_cli("account", "--user", "ann", "--name", "Ann")[0], 0)

        code, _ = self.run_cli("save", "--user", "ann", "--form", self.form_path, "--name", "Ann")
        self.assertEqual(code, 0)

        code, out = self.run_cli("load", "--user", "ann")
        self.assertEqual(code, 0)
        self.assertIn("## Professional Summary\n\nBuilt X", out)

    def test_save_without_account_fails(self):
        code, _ = self.run_cli("save", "--user", "ghost", "--form", self.form_path)
        self.assertEqual(code, 2)

    def test_save_blank_markdown_fails(self):
        self.run_cli("account", "--user", "ann")
        blank = os.path.join(self.root, "blank.md")
        with open(blank, "w", encoding="utf-8") as f:
            f.write("   \n")

        code, _ = self.run_cli("save", "--user", "ann", "--markdown", blank)

        self.assertEqual(code, 2)
        self.assertEqual(self.run_cli("load", "--user", "ann")[0], 1)

    def test_improve_without_api_key(self):
        self.run_cli("account", "--user", "ann")
        code, _ = self.run_cli("improve", "--user", "ann", "--type", "summary", "--text", "did stuff")
        self.assertEqual(code, 2)

    def test_export_docx(self):
        output_dir = os.path.join(self.root, "out")

        code, _ = self.run_cli("export", "--form", self.form_path, "--name", "Ann Lee",
                               "--format", "docx", "--output-dir", output_dir)

        self.assertEqual(code, 0)
        files = os.listdir(output_dir)
        self.assertEqual(len(files), 1)
        self.assertTrue(files[0].startswith("Ann_Lee_") and files[0].endswith(".docx"))
        with open(os.path.join(output_dir, files[0]), "rb") as f:
            self.assertEqual(f.read(2), b"PK")

    def test_missing_form_file(self):
        code, _ = self.run_cli("assemble", "--form", os.path.join(self.root, "missing.json"))
        self.assertEqual(code, 2)


if __name__ == '__main__':
    unittest.main()
