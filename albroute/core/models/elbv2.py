import threading
from typing import List, Sequence, Dict, Any, Iterator, Optional

from albroute.core.priority import parse_priority
from albroute.exceptions import AmbiguousTargetGroup, RuleCreationFailed, TargetGroupCreationFailed

from .abstract import AWS_ERRORS, Manager, Model, error_code, guard_pages


#: Condition fields and the per-field config block newer API responses carry
CONDITION_CONFIG_KEYS: Dict[str, str] = {
    'path-pattern': 'PathPatternConfig',
    'host-header': 'HostHeaderConfig',
}


# ----------------------------------------
# Managers
# ----------------------------------------


class LoadBalancerManager(Manager):

    service = 'elbv2'

    def get(self, pk: str, **_) -> "LoadBalancer":
        lbs = self.get_many([pk])
        if not lbs:
            raise LoadBalancer.DoesNotExist(f'LoadBalancer("{pk}") does not exist in AWS')
        if len(lbs) > 1:
            raise LoadBalancer.MultipleObjectsReturned(f"Got more than one load balancer when searching for pk={pk}")
        return lbs[0]

    def get_many(self, pks: List[str], **_) -> Sequence["LoadBalancer"]:
        arns = []
        names = []
        kwargs: Dict[str, Any] = {}
        for pk in pks:
            if pk.startswith('arn:'):
                arns.append(pk)
            else:
                names.append(pk)
        if names:
            kwargs['Names'] = names
        if arns:
            kwargs['LoadBalancerArns'] = arns
        paginator = self.client.get_paginator('describe_load_balancers')
        response_iterator = paginator.paginate(**kwargs)
        lbs = []
        try:
            for response in response_iterator:
                lbs.extend(response['LoadBalancers'])
        except AWS_ERRORS as e:
            if error_code(e) == 'LoadBalancerNotFound':
                raise LoadBalancer.DoesNotExist(str(e))
            raise LoadBalancer.LookupFailed(f'Could not describe load balancer(s) {", ".join(pks)}: {e}')
        return [LoadBalancer(lb) for lb in lbs]

    def get_by_name(self, name: str) -> "LoadBalancer":
        return self.get(name)


class LoadBalancerListenerManager(Manager):

    service = 'elbv2'

    def list(self, load_balancer: str) -> Sequence["LoadBalancerListener"]:
        if not load_balancer.startswith('arn:'):
            # This is a load balancer name
            load_balancer = LoadBalancer.objects.get(load_balancer).arn
        paginator = self.client.get_paginator('describe_listeners')
        response_iterator = paginator.paginate(LoadBalancerArn=load_balancer)
        listeners = []
        try:
            for response in response_iterator:
                listeners.extend(response['Listeners'])
        except AWS_ERRORS as e:
            if error_code(e) in ('LoadBalancerNotFound', 'ListenerNotFound'):
                raise LoadBalancer.DoesNotExist(str(e))
            raise LoadBalancerListener.LookupFailed(f'Could not get listeners for {load_balancer}: {e}')
        return [LoadBalancerListener(listener) for listener in listeners]


class LoadBalancerListenerRuleManager(Manager):

    service = 'elbv2'

    def pages(
        self,
        listener_arn: str,
        max_pages: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ) -> Iterator[List["LoadBalancerListenerRule"]]:
        """
        Yield the rules on ``listener_arn`` one page at a time, in the order AWS
        returns them.

        Keyword Args:
            max_pages: give up after this many pages
            cancel: if this gets set, stop before the next page

        Raises:
            LoadBalancerListener.DoesNotExist: no such listener
            LoadBalancerListenerRule.LookupFailed: AWS errored
            Cancelled: ``cancel`` was set
            PaginationLimitExceeded: the listener had more than ``max_pages``
                pages of rules
        """
        paginator = self.client.get_paginator('describe_rules')
        response_iterator = paginator.paginate(ListenerArn=listener_arn)
        try:
            for response in guard_pages(
                response_iterator,
                f'Listener {listener_arn}',
                max_pages=max_pages,
                cancel=cancel
            ):
                yield [LoadBalancerListenerRule(d, listener_arn=listener_arn) for d in response['Rules']]
        except AWS_ERRORS as e:
            if error_code(e) == 'ListenerNotFound':
                raise LoadBalancerListener.DoesNotExist(str(e))
            raise LoadBalancerListenerRule.LookupFailed(f'Could not describe rules for listener {listener_arn}: {e}')

    def list(
        self,
        listener_arn: str = None,
        max_pages: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ) -> Sequence["LoadBalancerListenerRule"]:
        """
        Return every rule on ``listener_arn``, in the order AWS returns them.
        """
        rules: List["LoadBalancerListenerRule"] = []
        for page in self.pages(listener_arn, max_pages=max_pages, cancel=cancel):
            rules.extend(page)
        return rules

    def create(
        self,
        listener_arn: str,
        priority: int,
        conditions: List[Dict[str, Any]],
        target_group_arn: str
    ) -> str:
        """
        Create a rule on ``listener_arn`` at ``priority`` that forwards requests
        matching ``conditions`` to ``target_group_arn``.

        Raises:
            RuleCreationFailed: AWS refused the rule.  ``cause`` on the exception
                is the AWS error code.

        Returns:
            The ARN of the new rule.
        """
        try:
            response = self.client.create_rule(
                ListenerArn=listener_arn,
                Priority=priority,
                Conditions=conditions,
                Actions=[
                    {
                        'Type': 'forward',
                        'TargetGroupArn': target_group_arn,
                    }
                ]
            )
        except AWS_ERRORS as e:
            code = error_code(e)
            raise RuleCreationFailed(
                f'Could not create rule on listener {listener_arn} at priority {priority}: {code}: {e}',
                cause=code,
                listener_arn=listener_arn,
                priority=priority
            )
        return response['Rules'][0]['RuleArn']


class TargetGroupManager(Manager):

    service = 'elbv2'

    def get(self, pk: str, **_) -> "TargetGroup":
        tgs = self.get_many([pk])
        if not tgs:
            raise TargetGroup.DoesNotExist(f'TargetGroup("{pk}") does not exist in AWS')
        if len(tgs) > 1:
            raise AmbiguousTargetGroup(f'Multiple target groups found for "{pk}" ({len(tgs)})')
        return tgs[0]

    def get_many(self, pks: List[str], **_) -> Sequence["TargetGroup"]:
        kwargs: Dict[str, List[str]] = {}
        for pk in pks:
            if pk.startswith('arn:'):
                kwargs.setdefault('TargetGroupArns', []).append(pk)
            else:
                kwargs.setdefault('Names', []).append(pk)
        paginator = self.client.get_paginator('describe_target_groups')
        response_iterator = paginator.paginate(**kwargs)
        tgs = []
        try:
            for response in response_iterator:
                tgs.extend(response['TargetGroups'])
        except AWS_ERRORS as e:
            if error_code(e) in ('TargetGroupNotFound', 'LoadBalancerNotFound'):
                raise TargetGroup.DoesNotExist(str(e))
            raise TargetGroup.LookupFailed(f'Could not describe target group(s) {", ".join(pks)}: {e}')
        return [TargetGroup(tg) for tg in tgs]

    def get_arn_by_name(self, name: str) -> str:
        return self.get(name).arn

    def create(self, obj: "TargetGroup") -> str:
        try:
            response = self.client.create_target_group(**obj.render_for_create())
        except AWS_ERRORS as e:
            code = error_code(e)
            raise TargetGroupCreationFailed(f'Could not create target group {obj.name}: {code}: {e}', cause=code)
        if not response.get('TargetGroups'):
            raise TargetGroupCreationFailed(
                f'Could not create target group {obj.name} (target group list is empty)'
            )
        obj.data.update(response['TargetGroups'][0])
        return obj.arn


# ----------------------------------------
# Models
# ----------------------------------------

class LoadBalancer(Model):

    objects = LoadBalancerManager()

    # ---------------------
    # Model overrides
    # ---------------------

    @property
    def pk(self) -> str:
        return self.arn

    @property
    def name(self) -> str:
        return self.data['LoadBalancerName']

    @property
    def arn(self) -> str:
        return self.data['LoadBalancerArn']

    # ---------------------------------
    # LoadBalancer-specific properties
    # ---------------------------------

    @property
    def vpc_id(self) -> str:
        return self.data['VpcId']


class LoadBalancerListener(Model):

    objects = LoadBalancerListenerManager()

    # ---------------------
    # Model overrides
    # ---------------------

    @property
    def pk(self) -> str:
        return self.arn

    @property
    def name(self) -> str:
        return f'{self.port} ({self.protocol})'

    @property
    def arn(self) -> str:
        return self.data['ListenerArn']

    # ----------------------------------------
    # LoadBalancerListener-specific properties
    # ----------------------------------------

    @property
    def port(self) -> Optional[int]:
        return self.data.get('Port')

    @property
    def protocol(self) -> str:
        return self.data.get('Protocol') or ''

    @property
    def ssl_certificates(self) -> List[str]:
        return [c['CertificateArn'] for c in self.data.get('Certificates', [])]

    def matches_protocol(self, protocols: Sequence[str]) -> bool:
        """
        Return ``True`` if our protocol is one of ``protocols``, ignoring case.
        """
        if not self.protocol:
            return False
        return self.protocol.lower() in [p.lower() for p in protocols]


class LoadBalancerListenerRule(Model):

    objects = LoadBalancerListenerRuleManager()

    def __init__(self, data: Dict[str, Any], listener_arn: str = None):
        super().__init__(data)
        self.listener_arn: Optional[str] = listener_arn

    # ---------------------
    # Model overrides
    # ---------------------

    @property
    def pk(self) -> str:
        return self.arn

    @property
    def name(self) -> str:
        return self.arn

    @property
    def arn(self) -> str:
        return self.data['RuleArn']

    # --------------------------------------------
    # LoadBalancerListenerRule-specific properties
    # --------------------------------------------

    @property
    def priority(self) -> int:
        """
        The rule priority as an int.  The listener's default rule has priority
        ``"default"``, which we treat as 0.
        """
        return parse_priority(self.data.get('Priority'))

    @property
    def raw_priority(self) -> str:
        return self.data.get('Priority', '')

    @property
    def conditions(self) -> List[Dict[str, Any]]:
        return self.data.get('Conditions', [])

    @property
    def actions(self) -> List[Dict[str, Any]]:
        return self.data.get('Actions', [])

    @property
    def is_default(self) -> bool:
        return bool(self.data.get('IsDefault', False))

    @staticmethod
    def condition_values(condition: Dict[str, Any]) -> List[str]:
        """
        Return the match values of ``condition``.  Look at the top level
        ``Values`` first, then at the per-field config block.
        """
        values = condition.get('Values')
        if values:
            return values
        config_key = CONDITION_CONFIG_KEYS.get(condition.get('Field', ''))
        if config_key and config_key in condition:
            return condition[config_key].get('Values', [])
        return []

    def forwards_to(self, target_group_arn: str) -> bool:
        """
        Return ``True`` if any of our ``forward`` actions points at ``target_group_arn``.
        """
        for action in self.actions:
            if action.get('Type') == 'forward' and action.get('TargetGroupArn') == target_group_arn:
                return True
        return False

    @property
    def target_group_arns(self) -> List[str]:
        return [
            action['TargetGroupArn'] for action in self.actions
            if action.get('Type') == 'forward' and 'TargetGroupArn' in action
        ]


class TargetGroup(Model):

    objects = TargetGroupManager()

    # ---------------------
    # Model overrides
    # ---------------------

    @property
    def pk(self) -> str:
        return self.data.get('TargetGroupArn', self.name)

    @property
    def name(self) -> str:
        return self.data['Name'] if 'Name' in self.data else self.data['TargetGroupName']

    @property
    def arn(self) -> str:
        return self.data['TargetGroupArn']

    def render_for_create(self) -> Dict[str, Any]:
        data = self.render()
        if 'TargetGroupName' in data:
            data['Name'] = data.pop('TargetGroupName')
        for key in ('TargetGroupArn', 'LoadBalancerArns'):
            data.pop(key, None)
        return data

    # ----------------------------------------
    # TargetGroup-specific properties
    # ----------------------------------------

    @property
    def port(self) -> int:
        return self.data['Port']

    @property
    def protocol(self) -> str:
        return self.data['Protocol']

    @property
    def vpc_id(self) -> Optional[str]:
        return self.data.get('VpcId')

    @vpc_id.setter
    def vpc_id(self, value: str) -> None:
        self.data['VpcId'] = value
