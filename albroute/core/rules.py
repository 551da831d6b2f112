"""
Build the conditions for a listener rule.

There are three kinds of rule, each with a fixed number of values:

* ``pathPattern``: ``[path]`` → ``path-pattern=path``
* ``hostname``: ``[host]`` → ``host-header=host.<domain>``
* ``combined``: ``[path, host]`` → ``path-pattern=path``, ``host-header=host.<domain>``

The number of values is checked when the :py:class:`RuleSpec` is built, so a
``RuleSpec`` that exists can always produce its conditions.
"""
from typing import Any, Dict, List, Sequence, Tuple, Type

from albroute.exceptions import InvalidRuleSpec


PATH_PATTERN: str = 'path-pattern'
HOST_HEADER: str = 'host-header'


def condition(field: str, value: str) -> Dict[str, Any]:
    return {'Field': field, 'Values': [value]}


def hostname(name: str, domain: str) -> str:
    return f'{name}.{domain}'


class RuleSpec:
    """
    Base class for our rule types.  Use :py:meth:`new` to get the right subclass
    for a rule type name.

    Args:
        values: the raw rule values, e.g. ``['/api/*']`` or ``['/api/*', 'www']``
    """

    #: The rule type name as it appears in albroute.yml and on the command line
    rule_type: str = ''
    #: How many values this rule type takes
    arity: int = 0
    #: The condition fields we emit, in order
    fields: Tuple[str, ...] = ()

    registry: Dict[str, Type["RuleSpec"]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if cls.rule_type:
            RuleSpec.registry[cls.rule_type] = cls

    @classmethod
    def new(cls, rule_type: str, values: Sequence[str]) -> "RuleSpec":
        """
        Build the right kind of ``RuleSpec`` for ``rule_type``.

        Raises:
            InvalidRuleSpec: ``rule_type`` is not one we know, or ``values``
                is the wrong length for it
        """
        try:
            spec_class = cls.registry[rule_type]
        except KeyError:
            raise InvalidRuleSpec(
                'ruleType not recognized: {} (expected one of: {})'.format(
                    rule_type,
                    ', '.join(sorted(cls.registry))
                )
            )
        return spec_class(values)

    def __init__(self, values: Sequence[str]) -> None:
        if len(values) != self.arity:
            raise InvalidRuleSpec(
                f'Wrong number of rules for {self.rule_type} (expected {self.arity}, got {len(values)})'
            )
        self.raw_values: List[str] = list(values)

    def values(self, domain: str) -> List[str]:
        """
        The condition values, in the same order as :py:attr:`fields`.
        """
        raise NotImplementedError

    def conditions(self, domain: str) -> List[Dict[str, Any]]:
        return [condition(field, value) for field, value in zip(self.fields, self.values(domain))]

    def __eq__(self, other) -> bool:
        if self.__class__ != other.__class__:
            return False
        return self.raw_values == other.raw_values

    def __repr__(self) -> str:
        return '{}({!r})'.format(self.__class__.__name__, self.raw_values)


class PathPatternRule(RuleSpec):

    rule_type = 'pathPattern'
    arity = 1
    fields = (PATH_PATTERN,)

    def values(self, domain: str) -> List[str]:
        return [self.raw_values[0]]


class HostnameRule(RuleSpec):

    rule_type = 'hostname'
    arity = 1
    fields = (HOST_HEADER,)

    def values(self, domain: str) -> List[str]:
        return [hostname(self.raw_values[0], domain)]


class CombinedRule(RuleSpec):

    rule_type = 'combined'
    arity = 2
    fields = (PATH_PATTERN, HOST_HEADER)

    def values(self, domain: str) -> List[str]:
        return [self.raw_values[0], hostname(self.raw_values[1], domain)]


def build_conditions(rule_type: str, values: Sequence[str], domain: str) -> List[Dict[str, Any]]:
    """
    Return the ordered list of conditions for a new rule of type ``rule_type``.

    An empty ``domain`` is not an error here: hostname based rules come out
    ending in a bare ``.``.  Callers should make sure they have a domain first.

    Raises:
        InvalidRuleSpec: unknown ``rule_type`` or wrong number of ``values``
    """
    return RuleSpec.new(rule_type, values).conditions(domain)
