from typing import Dict, Any, List, Tuple

from albroute.core.rules import RuleSpec
from albroute.exceptions import InvalidRuleSpec

from ..abstract import Adapter


class TargetGroupAdapter(Adapter):
    """
    Build the ``CreateTargetGroup`` request for a service from its
    albroute.yml entry::

        {
            'name': 'foobar-prod',
            'service_port': 8080,
            'service_protocol': 'HTTP',
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

    Health check settings that are missing, empty or zero are left out so AWS
    uses its defaults.  The VPC gets filled in later by the load balancer
    session.
    """

    #: albroute.yml health_check key -> (CreateTargetGroup key, type)
    HEALTH_CHECK_KEYS: Dict[str, Tuple[str, type]] = {
        'healthy_threshold': ('HealthyThresholdCount', int),
        'unhealthy_threshold': ('UnhealthyThresholdCount', int),
        'path': ('HealthCheckPath', str),
        'port': ('HealthCheckPort', str),
        'protocol': ('HealthCheckProtocol', str),
        'interval': ('HealthCheckIntervalSeconds', int),
    }

    def get_name(self) -> str:
        name = self.data.get('target_group', self.data.get('name'))
        if not name:
            raise self.SchemaException('TargetGroupAdapter: service has no "name"')
        return name

    def get_health_check(self) -> Dict[str, Any]:
        health_check = self.data.get('health_check', {}) or {}
        data: Dict[str, Any] = {}
        for source_key, (dest_key, convert) in self.HEALTH_CHECK_KEYS.items():
            value = health_check.get(source_key)
            if value:
                data[dest_key] = convert(value)
        if health_check.get('matcher'):
            data['Matcher'] = {'HttpCode': str(health_check['matcher'])}
        timeout = health_check.get('timeout')
        if timeout and int(timeout) > 0:
            data['HealthCheckTimeoutSeconds'] = int(timeout)
        return data

    def convert(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        data: Dict[str, Any] = {}
        data['Name'] = self.get_name()
        self.set(data, 'service_port', 'Port', convert=int)
        self.set(data, 'service_protocol', 'Protocol', default='HTTP', convert=lambda x: str(x).upper())
        self.set(data, 'target_type', 'TargetType', optional=True)
        if 'vpc_id' in self.data:
            data['VpcId'] = self.data['vpc_id']
        data.update(self.get_health_check())
        return data, {}


class ListenerRuleAdapter(Adapter):
    """
    Turn one entry from a service's ``rules:`` list into a
    :py:class:`albroute.core.rules.RuleSpec` plus the listener protocols to
    apply it to::

        {
            'type': 'combined',
            'values': ['/api/*', 'foobar'],
            'listeners': ['HTTPS']
        }

    ``listeners`` is optional; without it the rule goes on every listener.
    """

    def convert(self) -> Tuple[RuleSpec, Dict[str, Any]]:
        try:
            rule_type = self.data['type']
        except KeyError:
            raise self.SchemaException('ListenerRuleAdapter: rule has no "type"')
        values = self.data.get('values', [])
        if isinstance(values, str):
            values = [values]
        try:
            spec = RuleSpec.new(rule_type, [str(v) for v in values])
        except InvalidRuleSpec as e:
            raise self.SchemaException(f'ListenerRuleAdapter: {e}')
        protocols: List[str] = self.data.get('listeners', []) or []
        if isinstance(protocols, str):
            protocols = [protocols]
        return spec, {'protocols': [p.upper() for p in protocols]}
