from typing import Any, Dict, List

from albroute.core.models import LoadBalancerListenerRule


#: ELBv2 condition field -> the short label we show for it
CONDITION_LABELS: Dict[str, str] = {
    'path-pattern': 'path',
    'host-header': 'hostname',
    'http-header': 'header',
    'http-request-method': 'verb',
    'query-string': 'qs',
    'source-ip': 'ip',
}


def describe_condition(condition: Dict[str, Any]) -> List[str]:
    """
    Return one ``label:value`` string per value in an ELBv2 rule condition.
    """
    field = condition.get('Field', '')
    label = CONDITION_LABELS.get(field, field)
    if field == 'query-string':
        return [
            f"{label}:{v.get('Key', '')}={v['Value']}"
            for v in condition.get('QueryStringConfig', {}).get('Values', [])
        ]
    if field == 'http-header':
        config = condition.get('HttpHeaderConfig', {})
        return ["{}:{} -> {}".format(label, config.get('HttpHeaderName', ''), ','.join(config.get('Values', [])))]
    return [f'{label}:{v}' for v in LoadBalancerListenerRule.condition_values(condition)]


def rule_conditions(rule: LoadBalancerListenerRule) -> str:
    """
    Describe the conditions on ``rule`` one per line.  The listener's default
    rule has no conditions and shows as ``default``.
    """
    conditions: List[str] = []
    for condition in rule.conditions:
        conditions.extend(describe_condition(condition))
    if not conditions:
        return 'default'
    return '\n'.join(sorted(conditions))
