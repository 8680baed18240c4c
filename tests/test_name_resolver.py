"""Tests for UniqueNameResolver."""

import unittest

from figma_asset_exporter.name_resolver import UniqueNameResolver


class TestUniqueNameResolver(unittest.TestCase):
    def setUp(self):
        self.resolver = UniqueNameResolver()

    def test_first_occurrence_unchanged(self):
        """Names never seen before are returned as-is."""
        self.assertEqual(self.resolver.get('Icon'), 'Icon')
        self.assertEqual(self.resolver.get('Logo'), 'Logo')

    def test_repeated_names_get_counter_suffix(self):
        """Second and third uses get -1 and -2."""
        names = [self.resolver.get('Icon') for _ in range(3)]
        self.assertEqual(names, ['Icon', 'Icon-1', 'Icon-2'])

    def test_counters_are_per_name(self):
        self.assertEqual(self.resolver.get('A'), 'A')
        self.assertEqual(self.resolver.get('B'), 'B')
        self.assertEqual(self.resolver.get('A'), 'A-1')
        self.assertEqual(self.resolver.get('B'), 'B-1')

    def test_literal_suffixed_name_does_not_collide(self):
        """A literal 'Icon-1' after two 'Icon' requests stays distinct."""
        outputs = [self.resolver.get(name) for name in ['Icon', 'Icon', 'Icon-1', 'Icon-1']]
        self.assertEqual(outputs[:2], ['Icon', 'Icon-1'])
        self.assertEqual(len(set(outputs)), len(outputs))

    def test_generated_name_skips_previously_issued_literal(self):
        outputs = [self.resolver.get(name) for name in ['Icon-1', 'Icon', 'Icon']]
        self.assertEqual(outputs, ['Icon-1', 'Icon', 'Icon-2'])

    def test_outputs_pairwise_distinct(self):
        candidates = ['a', 'a', 'a-1', 'a-1-1', 'a', 'b', 'a-2', '', '', '-1']
        outputs = [self.resolver.get(name) for name in candidates]
        self.assertEqual(len(set(outputs)), len(outputs))

    def test_deterministic_for_same_call_order(self):
        candidates = ['x', 'y', 'x', 'x-1', 'y', 'x']
        shared_a = UniqueNameResolver()
        shared_b = UniqueNameResolver()
        self.assertEqual(
            [shared_a.get(name) for name in candidates],
            [shared_b.get(name) for name in candidates]
        )

    def test_issued_tracking(self):
        self.resolver.get('Icon')
        self.resolver.get('Icon')
        self.assertIn('Icon-1', self.resolver)
        self.assertEqual(len(self.resolver), 2)
        self.assertEqual(self.resolver.issued, frozenset({'Icon', 'Icon-1'}))


if __name__ == '__main__':
    unittest.main()
