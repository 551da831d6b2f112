import unittest

from testfixtures import compare

from albroute.core.adapters.abstract import Adapter
from albroute.core.adapters.albroute.elbv2 import ListenerRuleAdapter, TargetGroupAdapter
from albroute.core.models import TargetGroup
from albroute.core.rules import CombinedRule, PathPatternRule


class TestTargetGroupAdapter(unittest.TestCase):

    YML = {
        'name': 'foobar-prod',
        'service_port': '8080',
        'service_protocol': 'http',
        'health_check': {
            'healthy_threshold': 3,
            'unhealthy_threshold': 2,
            'path': '/healthz',
            'port': 'traffic-port',
            'protocol': 'HTTP',
            'interval': 30,
            'matcher': '200-299',
            'timeout': 5
        }
    }

    def test_convert(self):
        data, kwargs = TargetGroupAdapter(self.YML).convert()
        compare(data, {
            'Name': 'foobar-prod',
            'Port': 8080,
            'Protocol': 'HTTP',
            'HealthyThresholdCount': 3,
            'UnhealthyThresholdCount': 2,
            'HealthCheckPath': '/healthz',
            'HealthCheckPort': 'traffic-port',
            'HealthCheckProtocol': 'HTTP',
            'HealthCheckIntervalSeconds': 30,
            'Matcher': {'HttpCode': '200-299'},
            'HealthCheckTimeoutSeconds': 5,
        })
        compare(kwargs, {})

    def test_empty_health_check_settings_are_left_out(self):
        yml = {
            'name': 'foobar-prod',
            'service_port': 8080,
            'health_check': {'path': '', 'interval': 0, 'timeout': 0, 'matcher': None}
        }
        data, _ = TargetGroupAdapter(yml).convert()
        compare(data, {'Name': 'foobar-prod', 'Port': 8080, 'Protocol': 'HTTP'})

    def test_target_group_name_override(self):
        yml = {'name': 'foobar-prod', 'target_group': 'foobar-tg', 'service_port': 8080}
        data, _ = TargetGroupAdapter(yml).convert()
        self.assertEqual(data['Name'], 'foobar-tg')

    def test_port_is_required(self):
        with self.assertRaises(Adapter.SchemaException):
            TargetGroupAdapter({'name': 'foobar-prod'}).convert()

    def test_model_new(self):
        tg = TargetGroup.new(self.YML, 'albroute')
        self.assertEqual(tg.name, 'foobar-prod')
        self.assertEqual(tg.port, 8080)
        self.assertIsNone(tg.vpc_id)


class TestListenerRuleAdapter(unittest.TestCase):

    def test_convert(self):
        spec, kwargs = ListenerRuleAdapter({
            'type': 'combined',
            'values': ['/api/*', 'foobar'],
            'listeners': ['https']
        }).convert()
        self.assertEqual(spec, CombinedRule(['/api/*', 'foobar']))
        compare(kwargs, {'protocols': ['HTTPS']})

    def test_single_value_and_no_listeners(self):
        spec, kwargs = ListenerRuleAdapter({'type': 'pathPattern', 'values': '/api/*'}).convert()
        self.assertEqual(spec, PathPatternRule(['/api/*']))
        compare(kwargs, {'protocols': []})

    def test_missing_type(self):
        with self.assertRaises(Adapter.SchemaException):
            ListenerRuleAdapter({'values': ['/a']}).convert()

    def test_wrong_number_of_values(self):
        with self.assertRaises(Adapter.SchemaException) as cm:
            ListenerRuleAdapter({'type': 'combined', 'values': ['/a']}).convert()
        self.assertIn('expected 2, got 1', str(cm.exception))
