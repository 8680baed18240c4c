"""Tests for the figma-export command line entry point."""

import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest.mock import patch

from figma_asset_exporter.export import create_argument_parser, main


class TestExportCli(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def run_main(self, argv):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            code = main(argv)
        return code, stderr.getvalue()

    def test_parser_defaults(self):
        args = create_argument_parser().parse_args(['https://www.figma.com/file/ABC/Name'])
        self.assertFalse(args.dry_run)
        self.assertEqual(args.verbose, 0)
        self.assertIsNone(args.config)

    def test_invalid_source_exit_code(self):
        code, stderr = self.run_main(['https://example.com/x', '--token', 't', '--out', str(self.tmp / 'out')])
        self.assertEqual(code, 2)
        self.assertIn('Invalid source file.', stderr)

    def test_missing_token_exit_code(self):
        env = {key: value for key, value in os.environ.items() if key != 'FIGMA_TOKEN'}
        with patch.dict(os.environ, env, clear=True):
            code, stderr = self.run_main(['https://www.figma.com/file/ABC/Name', '--config',
                                          self._write_config('export:\n  progress_bars: false\n')])
        self.assertEqual(code, 2)
        self.assertIn('requires a token', stderr)

    def test_missing_config_file(self):
        code, stderr = self.run_main(['https://www.figma.com/file/ABC/Name', '--config', str(self.tmp / 'nope.yaml')])
        self.assertEqual(code, 2)
        self.assertIn('File not found', stderr)

    def test_invalid_config_value(self):
        code, stderr = self.run_main(['https://www.figma.com/file/ABC/Name', '--token', 't', '--batch-size', '500'])
        self.assertEqual(code, 2)
        self.assertIn('batch_size', stderr)

    def test_malformed_yaml_config(self):
        code, stderr = self.run_main(['https://www.figma.com/file/ABC/Name', '--token', 't',
                                      '--config', self._write_config('figma: [unclosed\n')])
        self.assertEqual(code, 2)
        self.assertIn('Invalid YAML', stderr)

    def test_unexpected_error_exit_code(self):
        with patch('figma_asset_exporter.export.ExportOrchestrator.export_svg', side_effect=RuntimeError('boom')):
            code, stderr = self.run_main(['https://www.figma.com/file/ABC/Name', '--token', 't'])
        self.assertEqual(code, 1)
        self.assertIn('Unexpected error: boom', stderr)

    def _write_config(self, text):
        path = self.tmp / 'config.yaml'
        path.write_text(text, encoding='utf-8')
        return str(path)


if __name__ == '__main__':
    unittest.main()
