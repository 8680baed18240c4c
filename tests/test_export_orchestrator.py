"""End-to-end tests for the export orchestrator with a fake Figma client."""

import tempfile
import threading
import unittest
from pathlib import Path
from unittest.mock import MagicMock

from figma_asset_exporter.config_loader import ConfigLoader
from figma_asset_exporter.exceptions import (
    AuthError,
    DownloadError,
    EmptyProjectError,
    InvalidSourceError,
    MissingTokenError,
    OutputError,
)
from figma_asset_exporter.orchestrator import ExportOrchestrator, ExportReport, ExportStage

PROJECT_URL = 'https://www.figma.com/file/ABC123/My-Design'


def file_response(children):
    return {
        'name': 'My Design',
        'lastModified': '2024-01-01T00:00:00Z',
        'thumbnailUrl': 'https://s3.example/thumb.png',
        'version': '42',
        'document': {
            'id': '0:0',
            'name': 'Document',
            'type': 'DOCUMENT',
            'children': [{'id': '0:1', 'name': 'Page 1', 'type': 'CANVAS', 'children': children}]
        }
    }


FRAME_WITH_ICONS = [
    {
        'id': '1:1',
        'name': 'Screen',
        'type': 'FRAME',
        'children': [
            {'id': '1:2', 'name': 'Icon', 'type': 'SLICE'},
            {'id': '1:3', 'name': 'Icon', 'type': 'SLICE'},
        ]
    }
]


class FakeFigmaClient:
    """Serves a fixed document and echoes render links; downloads write the URL to disk."""

    def __init__(self, document, fail_download_for=None):
        self.document = document
        self.fail_download_for = fail_download_for
        self.requests = []
        self.downloads = []
        self._lock = threading.Lock()

    def get_json(self, endpoint, params=None):
        with self._lock:
            self.requests.append((endpoint, params))
        if endpoint.startswith('files/'):
            return self.document
        ids = params['ids'].split(',')
        return {'err': None, 'images': {node_id: f'https://render.example/{node_id}.svg' for node_id in ids}}

    def download_file(self, url, destination):
        if self.fail_download_for and url.endswith(f'/{self.fail_download_for}.svg'):
            raise ConnectionError('connection reset')
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(url, encoding='utf-8')
        with self._lock:
            self.downloads.append(url)
        return len(url)


class TestExportOrchestrator(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.out = Path(self._tmp.name) / 'out'
        self.config = ConfigLoader.default_config()
        self.config['figma']['api_token'] = None
        self.config['export']['progress_bars'] = False

    def tearDown(self):
        self._tmp.cleanup()

    def test_end_to_end_frame_with_duplicate_slices(self):
        client = FakeFigmaClient(file_response(FRAME_WITH_ICONS))
        messages = []

        report = ExportOrchestrator(self.config, client=client, on_progress=messages.append) \
            .export_svg(PROJECT_URL, str(self.out))

        self.assertTrue((self.out / 'frames' / 'Screen.svg').exists())
        self.assertEqual((self.out / 'slices' / 'Icon.svg').read_text(encoding='utf-8'),
                         'https://render.example/1:2.svg')
        self.assertEqual((self.out / 'slices' / 'Icon-1.svg').read_text(encoding='utf-8'),
                         'https://render.example/1:3.svg')
        self.assertTrue((self.out / 'groups').is_dir())

        self.assertEqual(messages, [
            'Fetching information from Figma.',
            'Fetching SVG elements from Figma.',
            'Downloading SVG elements.',
        ])
        self.assertEqual(client.requests[0], ('files/ABC123', None))
        self.assertEqual(client.requests[1][0], 'images/ABC123')
        self.assertEqual(client.requests[1][1]['ids'], '1:1,1:2,1:3')

        summary = report['summary']
        self.assertEqual(summary['exportable_nodes'], 3)
        self.assertEqual(summary['downloaded'], 3)
        self.assertEqual(summary['folders'], {'frames': 1, 'slices': 2})
        self.assertIn('FIGMA EXPORT REPORT', ExportReport().format_console_report(report))

    def test_invalid_source(self):
        client = MagicMock()
        orchestrator = ExportOrchestrator(self.config, client=client)

        with self.assertRaises(InvalidSourceError) as ctx:
            orchestrator.export_svg('https://example.com/x', str(self.out))

        self.assertEqual(ctx.exception.stage, ExportStage.VALIDATE_SOURCE.value)
        client.get_json.assert_not_called()
        self.assertFalse(self.out.exists())

    def test_figma_file_without_url_is_rejected(self):
        with self.assertRaisesRegex(InvalidSourceError, 'valid Figma project URL'):
            ExportOrchestrator(self.config, client=MagicMock()).export_svg('design.figma', str(self.out))

    def test_missing_token(self):
        orchestrator = ExportOrchestrator(self.config)

        with self.assertRaises(MissingTokenError):
            orchestrator.export_svg(PROJECT_URL, str(self.out))

        self.assertEqual(orchestrator.current_stage, ExportStage.VALIDATE_TOKEN)

    def test_empty_project(self):
        client = FakeFigmaClient(file_response([{'id': '2:1', 'name': 'Text', 'type': 'TEXT'}]))

        with self.assertRaises(EmptyProjectError) as ctx:
            ExportOrchestrator(self.config, client=client).export_svg(PROJECT_URL, str(self.out))

        self.assertEqual(ctx.exception.stage, ExportStage.FETCH_RENDER_LINKS.value)
        self.assertEqual(len(client.requests), 1)

    def test_fetch_error_aborts_run(self):
        client = MagicMock()
        client.get_json.side_effect = AuthError('Figma rejected the access token (HTTP 403)', status_code=403)
        orchestrator = ExportOrchestrator(self.config, client=client)

        with self.assertRaises(AuthError) as ctx:
            orchestrator.export_svg(PROJECT_URL, str(self.out))

        self.assertEqual(ctx.exception.stage, ExportStage.FETCH_DOCUMENT.value)
        self.assertFalse(self.out.exists())

    def test_unwritable_output_directory_reports_stage(self):
        self.out.parent.mkdir(parents=True, exist_ok=True)
        self.out.write_text('not a directory', encoding='utf-8')
        client = FakeFigmaClient(file_response(FRAME_WITH_ICONS))
        orchestrator = ExportOrchestrator(self.config, client=client)

        with self.assertRaises(OutputError) as ctx:
            orchestrator.export_svg(PROJECT_URL, str(self.out))

        self.assertEqual(ctx.exception.stage, ExportStage.CREATE_FOLDERS.value)
        self.assertIsInstance(ctx.exception.__cause__, OSError)
        self.assertTrue(str(ctx.exception).startswith('[create_folders] '))
        self.assertEqual(orchestrator.current_stage, ExportStage.CREATE_FOLDERS)
        self.assertEqual(client.downloads, [])

    def test_download_failure_names_node(self):
        client = FakeFigmaClient(file_response(FRAME_WITH_ICONS), fail_download_for='1:3')

        with self.assertRaises(DownloadError) as ctx:
            ExportOrchestrator(self.config, client=client).export_svg(PROJECT_URL, str(self.out))

        self.assertEqual(ctx.exception.node_name, 'Icon-1')
        self.assertEqual(ctx.exception.stage, ExportStage.DOWNLOAD.value)

    def test_preview_does_not_touch_disk(self):
        client = FakeFigmaClient(file_response(FRAME_WITH_ICONS))
        self.config['export']['output_directory'] = str(self.out)

        nodes = ExportOrchestrator(self.config, client=client).preview(PROJECT_URL)

        self.assertEqual([n.name for n in nodes], ['Screen', 'Icon', 'Icon-1'])
        self.assertEqual(len(client.requests), 1)
        self.assertFalse(self.out.exists())

    def test_output_directory_from_config(self):
        client = FakeFigmaClient(file_response(FRAME_WITH_ICONS))
        self.config['export']['output_directory'] = str(self.out)

        ExportOrchestrator(self.config, client=client).export_svg(PROJECT_URL)

        self.assertTrue((self.out / 'frames' / 'Screen.svg').exists())


if __name__ == '__main__':
    unittest.main()
