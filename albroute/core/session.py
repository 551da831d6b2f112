import threading
from typing import Dict, List, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from cement.utils.misc import minimal_logger

from albroute.exceptions import Cancelled

from .domain import resolve_domain
from .finder import find_rule
from .models import Certificate, LoadBalancer, LoadBalancerListener, LoadBalancerListenerRule, TargetGroup
from .priority import highest_priority
from .rules import RuleSpec

if TYPE_CHECKING:
    from albroute.types import (
        CertificateDirectory,
        ListenerDirectory,
        LoadBalancerDirectory,
        RuleDirectory,
        SupportsLog,
        TargetGroupDirectory,
    )


RuleLike = Union[str, RuleSpec]


class LoadBalancerSession:
    """
    Everything we know about one application load balancer for the length of
    one run: its identity, its listeners, the domain it serves and (once
    :py:meth:`load_rules_snapshot` has been called) the rules on each listener.

    Call :py:meth:`load` before anything else.  The rules snapshot is a single
    point in time read; we don't notice if someone else changes the rules
    afterwards.

    Instances are not safe to share between threads.

    Args:
        name: the name (or ARN) of the load balancer

    Keyword Args:
        domain_override: if set, use this as our domain instead of the one we
            derive from the listener certificates
        log: where to send log messages
        max_pages: stop reading rules after this many pages per listener
        cancel: if this gets set, abort before the next AWS call with
            :py:exc:`albroute.exceptions.Cancelled`
        load_balancers: override the load balancer directory
        listeners: override the listener directory
        rules: override the rule directory
        certificates: override the certificate directory
        target_groups: override the target group directory
    """

    def __init__(
        self,
        name: str,
        domain_override: Optional[str] = None,
        log: "SupportsLog" = None,
        max_pages: Optional[int] = None,
        cancel: Optional[threading.Event] = None,
        load_balancers: "LoadBalancerDirectory" = None,
        listeners: "ListenerDirectory" = None,
        rules: "RuleDirectory" = None,
        certificates: "CertificateDirectory" = None,
        target_groups: "TargetGroupDirectory" = None
    ) -> None:
        self.name: str = name
        self.arn: Optional[str] = None
        self.vpc_id: Optional[str] = None
        self.domain_override: Optional[str] = domain_override
        self.discovered_domain: str = ''
        self.listeners: List[LoadBalancerListener] = []
        #: listener ARN -> rules on that listener, in AWS order
        self.rules: Dict[str, List[LoadBalancerListenerRule]] = {}
        self.log = log if log else minimal_logger(__name__)
        self.max_pages = max_pages
        self.cancel = cancel
        self.load_balancer_directory = load_balancers if load_balancers else LoadBalancer.objects
        self.listener_directory = listeners if listeners else LoadBalancerListener.objects
        self.rule_directory = rules if rules else LoadBalancerListenerRule.objects
        self.certificate_directory = certificates if certificates else Certificate.objects
        self.target_group_directory = target_groups if target_groups else TargetGroup.objects

    def check_cancelled(self) -> None:
        if self.cancel is not None and self.cancel.is_set():
            raise Cancelled(f'LoadBalancerSession("{self.name}"): cancelled')

    # ------------------------------
    # Discovery
    # ------------------------------

    def load(self) -> "LoadBalancerSession":
        """
        Look up our load balancer, its listeners and its domain, in that order.

        Raises:
            LoadBalancer.DoesNotExist: no load balancer with our name
            LoadBalancer.LookupFailed: AWS errored while describing it
            CertificateLookupFailed: we could not describe a listener certificate
        """
        self.check_cancelled()
        lb = self.load_balancer_directory.get_by_name(self.name)
        self.arn = lb.arn
        self.name = lb.name
        self.vpc_id = lb.vpc_id
        self.log.debug(f'LoadBalancerSession("{self.name}"): arn={self.arn} vpc={self.vpc_id}')
        self.check_cancelled()
        self.listeners = list(self.listener_directory.list(self.arn))
        self.log.debug(f'LoadBalancerSession("{self.name}"): found {len(self.listeners)} listeners')
        self.check_cancelled()
        self.discovered_domain = resolve_domain(self.listeners, self.certificate_directory, log=self.log)
        return self

    @property
    def domain(self) -> str:
        """
        The domain we append to hostname rules: the override if we were given
        one, otherwise whatever we found on the listener certificates.
        """
        if self.domain_override:
            return self.domain_override
        return self.discovered_domain

    @property
    def reference_listener(self) -> LoadBalancerListener:
        if not self.listeners:
            raise LoadBalancer.OperationFailed(f'LoadBalancer("{self.name}") has no listeners')
        return self.listeners[0]

    def load_rules_snapshot(self) -> Dict[str, List[LoadBalancerListenerRule]]:
        """
        Read every rule on every listener and save them in :py:attr:`rules`.
        """
        snapshot: Dict[str, List[LoadBalancerListenerRule]] = {}
        for listener in self.listeners:
            self.check_cancelled()
            rules = list(self.rule_directory.list(listener.arn, max_pages=self.max_pages, cancel=self.cancel))
            self.log.debug(f'Imported {len(rules)} rules from listener {listener.name}')
            snapshot[listener.arn] = rules
        self.rules = snapshot
        return self.rules

    # ------------------------------
    # Priorities
    # ------------------------------

    def highest_priority(self) -> int:
        """
        Return the highest rule priority on our first listener.  We assume all
        our listeners share one priority space.
        """
        return highest_priority(
            self.reference_listener.arn,
            self.rule_directory,
            log=self.log,
            max_pages=self.max_pages,
            cancel=self.cancel
        )

    def next_priority(self) -> int:
        return self.highest_priority() + 1

    # ------------------------------
    # Rule creation
    # ------------------------------

    def rule_spec(self, rule: RuleLike, values: Optional[Sequence[str]] = None) -> RuleSpec:
        if isinstance(rule, RuleSpec):
            return rule
        return RuleSpec.new(rule, values if values is not None else [])

    def apply_to_listener(
        self,
        rule: RuleLike,
        listener_arn: str,
        target_group_arn: str,
        values: Optional[Sequence[str]] = None,
        *,
        priority: int
    ) -> str:
        """
        Create one rule on ``listener_arn`` that forwards to ``target_group_arn``.

        Raises:
            InvalidRuleSpec: bad rule type or wrong number of values
            RuleCreationFailed: AWS refused the rule

        Returns:
            The new rule's ARN.
        """
        spec = self.rule_spec(rule, values)
        conditions = spec.conditions(self.domain)
        self.check_cancelled()
        rule_arn = self.rule_directory.create(listener_arn, priority, conditions, target_group_arn)
        self.log.debug(
            f'Created rule {rule_arn} on {listener_arn} at priority {priority}: {conditions}'
        )
        return rule_arn

    def apply_to_all_listeners(
        self,
        rule: RuleLike,
        target_group_arn: str,
        values: Optional[Sequence[str]] = None,
        *,
        priority: int
    ) -> List[str]:
        """
        Create the rule on each of our listeners, in order.  If a create fails
        we stop there; rules already created on earlier listeners stay.

        Returns:
            The ARNs of the listeners we added the rule to.
        """
        spec = self.rule_spec(rule, values)
        touched: List[str] = []
        for listener in self.listeners:
            self.apply_to_listener(spec, listener.arn, target_group_arn, priority=priority)
            touched.append(listener.arn)
        return touched

    def apply_to_listeners(
        self,
        rule: RuleLike,
        protocols: Sequence[str],
        target_group_arn: str,
        values: Optional[Sequence[str]] = None,
        *,
        priority: int
    ) -> List[str]:
        """
        Like :py:meth:`apply_to_all_listeners`, but only for listeners whose
        protocol is in ``protocols`` (ignoring case).  If no listener matches,
        we do nothing and return an empty list.
        """
        spec = self.rule_spec(rule, values)
        touched: List[str] = []
        for listener in self.listeners:
            if not listener.matches_protocol(protocols):
                continue
            self.apply_to_listener(spec, listener.arn, target_group_arn, priority=priority)
            touched.append(listener.arn)
        return touched

    def listeners_for(self, protocols: Optional[Sequence[str]] = None) -> List[LoadBalancerListener]:
        if not protocols:
            return list(self.listeners)
        return [listener for listener in self.listeners if listener.matches_protocol(protocols)]

    # ------------------------------
    # Rule lookup
    # ------------------------------

    def find_rule(
        self,
        listener_arn: str,
        target_group_arn: str,
        fields: Sequence[str],
        values: Sequence[str]
    ) -> Tuple[str, int]:
        """
        See :py:func:`albroute.core.finder.find_rule`.  Uses the snapshot from
        :py:meth:`load_rules_snapshot`.
        """
        return find_rule(self.rules, listener_arn, target_group_arn, fields, values)

    def find_rule_for_spec(self, listener_arn: str, target_group_arn: str, spec: RuleSpec) -> Tuple[str, int]:
        """
        Look for a rule with exactly the conditions ``spec`` would create.
        """
        return self.find_rule(listener_arn, target_group_arn, list(spec.fields), spec.values(self.domain))

    # ------------------------------
    # Target groups
    # ------------------------------

    def create_target_group(self, target_group: TargetGroup) -> str:
        """
        Create ``target_group`` in our VPC.

        Returns:
            The ARN of the new target group.
        """
        target_group.vpc_id = self.vpc_id
        self.check_cancelled()
        arn = self.target_group_directory.create(target_group)
        self.log.info(f'Created target group {target_group.name}: {arn}')
        return arn

    def get_target_group_arn(self, name: str) -> str:
        """
        Raises:
            TargetGroup.DoesNotExist: no target group called ``name``
            AmbiguousTargetGroup: more than one target group called ``name``
        """
        self.check_cancelled()
        return self.target_group_directory.get_arn_by_name(name)
