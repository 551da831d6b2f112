import unittest

from testfixtures import compare

from albroute.core.rules import (
    CombinedRule,
    HostnameRule,
    PathPatternRule,
    RuleSpec,
    build_conditions,
)
from albroute.exceptions import InvalidRuleSpec


class TestBuildConditions(unittest.TestCase):

    def test_path_pattern(self):
        compare(
            build_conditions('pathPattern', ['/api/*'], 'example.com'),
            [{'Field': 'path-pattern', 'Values': ['/api/*']}]
        )

    def test_hostname_appends_domain(self):
        compare(
            build_conditions('hostname', ['www'], 'example.com'),
            [{'Field': 'host-header', 'Values': ['www.example.com']}]
        )

    def test_combined_is_path_then_host(self):
        compare(
            build_conditions('combined', ['/v1/*', 'api'], 'shop.io'),
            [
                {'Field': 'path-pattern', 'Values': ['/v1/*']},
                {'Field': 'host-header', 'Values': ['api.shop.io']},
            ]
        )

    def test_empty_domain_leaves_trailing_dot(self):
        compare(
            build_conditions('hostname', ['www'], ''),
            [{'Field': 'host-header', 'Values': ['www.']}]
        )

    def test_unknown_rule_type(self):
        with self.assertRaises(InvalidRuleSpec) as cm:
            build_conditions('query', ['a'], 'example.com')
        self.assertIn('query', str(cm.exception))

    def test_combined_with_one_value(self):
        with self.assertRaises(InvalidRuleSpec) as cm:
            build_conditions('combined', ['/a'], 'example.com')
        self.assertIn('expected 2, got 1', str(cm.exception))

    def test_path_pattern_with_two_values(self):
        with self.assertRaises(InvalidRuleSpec):
            build_conditions('pathPattern', ['/a', '/b'], 'example.com')

    def test_hostname_with_no_values(self):
        with self.assertRaises(InvalidRuleSpec):
            build_conditions('hostname', [], 'example.com')


class TestRuleSpec(unittest.TestCase):

    def test_new_returns_the_right_class(self):
        self.assertIsInstance(RuleSpec.new('pathPattern', ['/a']), PathPatternRule)
        self.assertIsInstance(RuleSpec.new('hostname', ['www']), HostnameRule)
        self.assertIsInstance(RuleSpec.new('combined', ['/a', 'www']), CombinedRule)

    def test_fields_and_values_are_parallel(self):
        spec = RuleSpec.new('combined', ['/a', 'www'])
        compare(list(spec.fields), ['path-pattern', 'host-header'])
        compare(spec.values('example.com'), ['/a', 'www.example.com'])

    def test_equality(self):
        self.assertEqual(RuleSpec.new('hostname', ['www']), HostnameRule(['www']))
        self.assertNotEqual(RuleSpec.new('hostname', ['www']), PathPatternRule(['www']))
        self.assertNotEqual(RuleSpec.new('hostname', ['www']), HostnameRule(['api']))

    def test_repr(self):
        self.assertEqual(repr(RuleSpec.new('pathPattern', ['/a'])), "PathPatternRule(['/a'])")
