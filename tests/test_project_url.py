"""Tests for Figma project URL parsing."""

import unittest

from figma_asset_exporter.models import ProjectReference
from figma_asset_exporter.project_url import can_parse, looks_like_source_file, parse_project_reference


class TestParseProjectReference(unittest.TestCase):
    def test_parses_id_and_name(self):
        reference = parse_project_reference('https://figma.com/file/ABC123/My-Design')
        self.assertEqual(reference, ProjectReference(id='ABC123', display_name='My-Design'))

    def test_subdomain_host(self):
        reference = parse_project_reference('https://www.figma.com/file/XYZ/Landing?node-id=1%3A2')
        self.assertEqual(reference.id, 'XYZ')
        self.assertEqual(reference.display_name, 'Landing')

    def test_missing_name_defaults_to_untitled(self):
        reference = parse_project_reference('https://www.figma.com/file/ABC123')
        self.assertEqual(reference.id, 'ABC123')
        self.assertEqual(reference.display_name, 'Untitled')

    def test_percent_encoded_name_is_decoded(self):
        reference = parse_project_reference('https://www.figma.com/file/ABC/My%20Design')
        self.assertEqual(reference.display_name, 'My Design')

    def test_other_host_returns_none(self):
        self.assertIsNone(parse_project_reference('https://example.com/x'))
        self.assertIsNone(parse_project_reference('https://notfigma.com/file/ABC/Name'))

    def test_missing_id_returns_none(self):
        self.assertIsNone(parse_project_reference('https://www.figma.com/'))
        self.assertIsNone(parse_project_reference('https://www.figma.com/file/'))

    def test_garbage_never_raises(self):
        for source in ['', None, 'not a url', 'http://[::1', 'design.figma', 42]:
            self.assertIsNone(parse_project_reference(source))


class TestSourcePredicates(unittest.TestCase):
    def test_looks_like_source_file(self):
        self.assertTrue(looks_like_source_file('designs/app.figma'))
        self.assertFalse(looks_like_source_file('designs/app.figma.bak'))
        self.assertFalse(looks_like_source_file(''))

    def test_can_parse(self):
        self.assertTrue(can_parse('app.figma'))
        self.assertTrue(can_parse('https://www.figma.com/file/ABC/Name'))
        self.assertFalse(can_parse('https://example.com/file/ABC/Name'))


if __name__ == '__main__':
    unittest.main()
