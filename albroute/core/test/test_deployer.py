import unittest

from mock import Mock
from testfixtures import compare

from albroute.core.deployer import ServiceRouter
from albroute.core.models import LoadBalancerListener, LoadBalancerListenerRule, TargetGroup
from albroute.core.rules import RuleSpec
from albroute.exceptions import RuleNotFound


HTTP_ARN = 'arn:listener/80'
HTTPS_ARN = 'arn:listener/443'
TG_ARN = 'arn:targetgroup/foobar-prod/abc'


SERVICE = {
    'name': 'foobar-prod',
    'load_balancer': 'my-alb',
    'service_port': 8080,
    'rules': [
        {'type': 'hostname', 'values': ['foobar'], 'listeners': ['HTTPS']},
        {'type': 'pathPattern', 'values': ['/foobar/*']},
    ]
}


def make_session():
    session = Mock()
    session.domain = 'example.com'
    http = LoadBalancerListener({'ListenerArn': HTTP_ARN, 'Port': 80, 'Protocol': 'HTTP'})
    https = LoadBalancerListener({'ListenerArn': HTTPS_ARN, 'Port': 443, 'Protocol': 'HTTPS'})

    def listeners_for(protocols=None):
        if not protocols:
            return [http, https]
        return [listener for listener in [http, https] if listener.matches_protocol(protocols)]

    session.listeners_for.side_effect = listeners_for
    session.next_priority.return_value = 11
    session.apply_to_listener.side_effect = lambda spec, arn, tg, priority: f'{arn}/rule/{priority}'
    session.get_target_group_arn.return_value = TG_ARN
    return session


class TestServiceRouter_ensure_target_group(unittest.TestCase):

    def test_existing_target_group(self):
        session = make_session()
        router = ServiceRouter(session, SERVICE, log=Mock())
        self.assertEqual(router.ensure_target_group(), TG_ARN)
        session.get_target_group_arn.assert_called_once_with('foobar-prod')
        session.create_target_group.assert_not_called()

    def test_missing_target_group_is_created(self):
        session = make_session()
        session.get_target_group_arn.side_effect = TargetGroup.DoesNotExist('nope')
        session.create_target_group.return_value = TG_ARN
        router = ServiceRouter(session, SERVICE, log=Mock())
        self.assertEqual(router.ensure_target_group(), TG_ARN)
        target_group = session.create_target_group.call_args[0][0]
        self.assertEqual(target_group.name, 'foobar-prod')
        self.assertEqual(target_group.port, 8080)
        self.assertEqual(target_group.protocol, 'HTTP')


class TestServiceRouter_ensure_rules(unittest.TestCase):

    def test_rule_specs(self):
        router = ServiceRouter(make_session(), SERVICE, log=Mock())
        compare(router.rule_specs(), [
            (RuleSpec.new('hostname', ['foobar']), ['HTTPS']),
            (RuleSpec.new('pathPattern', ['/foobar/*']), []),
        ])

    def test_creates_missing_rules_with_consecutive_priorities(self):
        session = make_session()
        session.find_rule_for_spec.side_effect = RuleNotFound(HTTPS_ARN, TG_ARN)
        router = ServiceRouter(session, SERVICE, log=Mock())
        results = router.deploy()
        compare(
            [(r.listener_arn, r.priority, r.status) for r in results],
            [
                (HTTPS_ARN, 11, 'created'),
                (HTTP_ARN, 12, 'created'),
                (HTTPS_ARN, 12, 'created'),
            ]
        )
        session.load_rules_snapshot.assert_called_once_with()
        session.next_priority.assert_called_once_with()
        self.assertEqual(results[0].description, 'host-header=foobar.example.com')

    def test_existing_rules_are_skipped(self):
        session = make_session()
        session.find_rule_for_spec.return_value = ('arn:rule/existing', 4)
        router = ServiceRouter(session, SERVICE, log=Mock())
        results = router.deploy()
        self.assertTrue(all(r.status == 'exists' for r in results))
        self.assertEqual([r.rule_arn for r in results], ['arn:rule/existing'] * 3)
        session.apply_to_listener.assert_not_called()
        session.next_priority.assert_not_called()

    def test_only_missing_listener_gets_the_rule(self):
        session = make_session()

        def find(listener_arn, tg_arn, spec):
            if listener_arn == HTTP_ARN:
                raise RuleNotFound(listener_arn, tg_arn)
            return ('arn:rule/existing', 4)

        session.find_rule_for_spec.side_effect = find
        router = ServiceRouter(session, SERVICE, log=Mock())
        results = router.deploy()
        created = [r for r in results if r.created]
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].listener_arn, HTTP_ARN)
        self.assertEqual(created[0].priority, 11)
        session.apply_to_listener.assert_called_once_with(
            RuleSpec.new('pathPattern', ['/foobar/*']),
            HTTP_ARN,
            TG_ARN,
            priority=11
        )

    def test_ensure_rules_looks_up_target_group_first(self):
        session = make_session()
        session.find_rule_for_spec.return_value = ('arn:rule/existing', 4)
        router = ServiceRouter(session, SERVICE, log=Mock())
        router.ensure_rules()
        self.assertEqual(router.target_group_arn, TG_ARN)
        session.get_target_group_arn.assert_called_once_with('foobar-prod')
        session.find_rule_for_spec.assert_any_call(HTTPS_ARN, TG_ARN, RuleSpec.new('hostname', ['foobar']))

    def test_ensure_rules_reuses_known_target_group(self):
        session = make_session()
        session.find_rule_for_spec.return_value = ('arn:rule/existing', 4)
        router = ServiceRouter(session, SERVICE, log=Mock())
        router.target_group_arn = 'arn:targetgroup/already-known'
        router.ensure_rules()
        session.get_target_group_arn.assert_not_called()
        session.find_rule_for_spec.assert_any_call(
            HTTP_ARN, 'arn:targetgroup/already-known', RuleSpec.new('pathPattern', ['/foobar/*'])
        )
