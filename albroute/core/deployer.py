from typing import Any, Dict, List, Optional, Tuple, TYPE_CHECKING

from cement.utils.misc import minimal_logger

import albroute.core.adapters  # noqa:F401  # pylint:disable=unused-import
from albroute.exceptions import ObjectDoesNotExist, RuleNotFound
from albroute.registry import importer_registry

from .models import TargetGroup
from .rules import RuleSpec
from .session import LoadBalancerSession

if TYPE_CHECKING:
    from albroute.types import SupportsLog


class RuleResult:
    """
    What happened to one configured rule on one listener during a deploy.
    """

    def __init__(
        self,
        listener_arn: str,
        spec: RuleSpec,
        conditions: List[Dict[str, Any]],
        priority: int,
        rule_arn: Optional[str] = None,
        created: bool = False
    ) -> None:
        self.listener_arn = listener_arn
        self.spec = spec
        self.conditions = conditions
        self.priority = priority
        self.rule_arn = rule_arn
        self.created = created

    @property
    def status(self) -> str:
        return 'created' if self.created else 'exists'

    @property
    def description(self) -> str:
        return ', '.join(
            '{}={}'.format(c['Field'], ','.join(c['Values'])) for c in self.conditions
        )


class ServiceRouter:
    """
    Make sure a service from albroute.yml has its target group and its
    listener rules on the load balancer.

    Rules are looked up in the session's rules snapshot before we create them,
    so running a deploy twice does not add duplicate rules.  Each rule we do
    have to create gets the next free priority.

    Args:
        session: a loaded :py:class:`LoadBalancerSession`
        service: the service's entry from the ``services:`` section of albroute.yml

    Keyword Args:
        log: where to send log messages
    """

    def __init__(self, session: LoadBalancerSession, service: Dict[str, Any], log: "SupportsLog" = None) -> None:
        self.session = session
        self.service = service
        self.log = log if log else minimal_logger(__name__)
        self.target_group_arn: Optional[str] = None

    @property
    def name(self) -> str:
        return self.service['name']

    def rule_specs(self) -> List[Tuple[RuleSpec, List[str]]]:
        specs = []
        adapter_class = importer_registry.get('RuleSpec', 'albroute')
        for rule in self.service.get('rules', []):
            spec, kwargs = adapter_class(rule).convert()
            specs.append((spec, kwargs['protocols']))
        return specs

    def ensure_target_group(self) -> str:
        """
        Find the target group for our service, creating it if needed.

        Returns:
            The target group ARN.
        """
        target_group = TargetGroup.new(self.service, 'albroute')
        try:
            arn = self.session.get_target_group_arn(target_group.name)
        except ObjectDoesNotExist:
            self.log.info(f'Service("{self.name}"): creating target group {target_group.name}')
            arn = self.session.create_target_group(target_group)
        else:
            self.log.info(f'Service("{self.name}"): using existing target group {target_group.name}')
        self.target_group_arn = arn
        return arn

    def ensure_rules(self) -> List[RuleResult]:
        """
        For each configured rule and each listener it applies to, reuse a
        matching rule if there is one, otherwise create it.
        """
        target_group_arn = self.target_group_arn or self.ensure_target_group()
        self.session.load_rules_snapshot()
        results: List[RuleResult] = []
        next_priority: Optional[int] = None
        for spec, protocols in self.rule_specs():
            conditions = spec.conditions(self.session.domain)
            missing = []
            for listener in self.session.listeners_for(protocols):
                try:
                    rule_arn, priority = self.session.find_rule_for_spec(listener.arn, target_group_arn, spec)
                except RuleNotFound:
                    missing.append(listener)
                else:
                    self.log.info(
                        f'Service("{self.name}"): rule {spec!r} already exists on {listener.name} '
                        f'at priority {priority}'
                    )
                    results.append(RuleResult(listener.arn, spec, conditions, priority, rule_arn=rule_arn))
            if not missing:
                continue
            if next_priority is None:
                next_priority = self.session.next_priority()
            else:
                next_priority += 1
            for listener in missing:
                rule_arn = self.session.apply_to_listener(spec, listener.arn, target_group_arn, priority=next_priority)
                self.log.info(
                    f'Service("{self.name}"): created rule {spec!r} on {listener.name} at priority {next_priority}'
                )
                results.append(
                    RuleResult(listener.arn, spec, conditions, next_priority, rule_arn=rule_arn, created=True)
                )
        return results

    def deploy(self) -> List[RuleResult]:
        self.ensure_target_group()
        return self.ensure_rules()
