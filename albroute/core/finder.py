from typing import Dict, Mapping, Sequence, Tuple

from albroute.core.models import LoadBalancerListenerRule
from albroute.exceptions import ArgumentMismatch, ListenerNotInSnapshot, RuleNotFound


RulesSnapshot = Mapping[str, Sequence[LoadBalancerListenerRule]]


def condition_matches(condition: Dict, fields: Sequence[str], values: Sequence[str]) -> bool:
    """
    Return ``True`` if ``condition`` has the same field and (first) value as one
    of the requested ``(fields[i], values[i])`` pairs.
    """
    rule_values = LoadBalancerListenerRule.condition_values(condition)
    if not rule_values:
        return False
    for field, value in zip(fields, values):
        if condition.get('Field') == field and rule_values[0] == value:
            return True
    return False


def rule_matches(rule: LoadBalancerListenerRule, fields: Sequence[str], values: Sequence[str]) -> bool:
    """
    Every one of ``rule``'s own conditions has to match a requested pair.  A
    rule with conditions {A} is matched by a request for {A, B}; a rule with
    {A, B} is not matched by a request for {A}.  A rule with no conditions
    never matches.
    """
    if not rule.conditions:
        return False
    return all(condition_matches(c, fields, values) for c in rule.conditions)


def find_rule(
    snapshot: RulesSnapshot,
    listener_arn: str,
    target_group_arn: str,
    fields: Sequence[str],
    values: Sequence[str]
) -> Tuple[str, int]:
    """
    Look through the rules we loaded for ``listener_arn`` for one that forwards
    to ``target_group_arn`` under the conditions given by the parallel lists
    ``fields`` and ``values``.

    This only tells the caller whether such a rule exists; nothing stops them
    from creating another one.

    Raises:
        ArgumentMismatch: ``fields`` and ``values`` have different lengths
        ListenerNotInSnapshot: we have no rules loaded for ``listener_arn``
        RuleNotFound: no rule matched

    Returns:
        The ARN and priority of the first matching rule, in listener order.
    """
    if len(fields) != len(values):
        raise ArgumentMismatch(
            f'conditionField length ({len(fields)}) not equal to conditionValue length ({len(values)})'
        )
    if listener_arn not in snapshot:
        raise ListenerNotInSnapshot(listener_arn)
    for rule in snapshot[listener_arn]:
        if rule.forwards_to(target_group_arn) and rule_matches(rule, fields, values):
            return rule.arn, rule.priority
    raise RuleNotFound(listener_arn, target_group_arn, fields=list(fields), values=list(values))
