import threading
import unittest

from mock import Mock

from albroute.core.models import LoadBalancerListenerRule
from albroute.core.priority import highest_priority, parse_priority
from albroute.exceptions import PaginationLimitExceeded


LISTENER_ARN = 'arn:aws:elasticloadbalancing:us-west-2:123456789012:listener/app/alb/abc/443'


def rule(priority):
    return LoadBalancerListenerRule({
        'RuleArn': f'arn:rule/{priority}',
        'Priority': priority,
        'Conditions': [],
        'Actions': [],
    })


def paged_directory(*pages):
    """
    A rule directory whose ``pages`` yields ``pages`` in order, each page a
    list of priorities.
    """
    directory = Mock()
    directory.pages.return_value = iter([[rule(p) for p in priorities] for priorities in pages])
    return directory


class TestParsePriority(unittest.TestCase):

    def test_number(self):
        self.assertEqual(parse_priority('42'), 42)

    def test_default(self):
        self.assertEqual(parse_priority('default'), 0)

    def test_none(self):
        self.assertEqual(parse_priority(None), 0)


class TestHighestPriority(unittest.TestCase):

    def setUp(self):
        self.log = Mock()

    def test_max_across_pages(self):
        directory = paged_directory(['3', '1'], ['4', '1', '5'])
        self.assertEqual(highest_priority(LISTENER_ARN, directory, log=self.log), 5)
        directory.pages.assert_called_once_with(LISTENER_ARN, max_pages=None, cancel=None)

    def test_no_rules(self):
        directory = paged_directory([])
        self.assertEqual(highest_priority(LISTENER_ARN, directory, log=self.log), 0)

    def test_default_rule_counts_as_zero(self):
        directory = paged_directory(['default'])
        self.assertEqual(highest_priority(LISTENER_ARN, directory, log=self.log), 0)

    def test_default_rule_does_not_hide_others(self):
        directory = paged_directory(['7', 'default'])
        self.assertEqual(highest_priority(LISTENER_ARN, directory, log=self.log), 7)

    def test_page_guard_settings_are_passed_on(self):
        directory = paged_directory(['1'])
        cancel = threading.Event()
        highest_priority(LISTENER_ARN, directory, log=self.log, max_pages=2, cancel=cancel)
        directory.pages.assert_called_once_with(LISTENER_ARN, max_pages=2, cancel=cancel)

    def test_page_limit_propagates(self):
        directory = Mock()
        directory.pages.side_effect = PaginationLimitExceeded('too many pages')
        with self.assertRaises(PaginationLimitExceeded):
            highest_priority(LISTENER_ARN, directory, log=self.log)
