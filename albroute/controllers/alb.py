import argparse
import os
from typing import Any, List, Optional, Tuple

import click
from cement import ex

from albroute.config.processors.environment import EnvironmentConfigProcessor
from albroute.core.deployer import ServiceRouter
from albroute.core.models import TargetGroup
from albroute.core.session import LoadBalancerSession
from albroute.exceptions import SchemaException
from albroute.ext.ext_albroute_argparse import AlbRouteArgparseController as Controller

from .utils import handle_model_exceptions


def condition_pair(value: str) -> Tuple[str, str]:
    """
    Parse a ``field=value`` command line argument.
    """
    field, sep, match = value.partition('=')
    if not sep or not field:
        raise argparse.ArgumentTypeError(f'"{value}" is not of the form field=value')
    return field, match


def usable_domain(value: Optional[str]) -> bool:
    """
    Return ``True`` if ``value`` can be used as a domain override.  Empty values
    and values with an undereferenced ``${env.VAR}`` in them mean "use the
    certificate domain".
    """
    if not value:
        return False
    return EnvironmentConfigProcessor.MISSING_VALUE not in str(value)


def nothing_to_do_message(load_balancer: str, protocols: List[str]) -> str:
    if protocols:
        return 'Load balancer {} has no listeners with protocol {}: nothing to do'.format(
            load_balancer,
            ', '.join(protocols)
        )
    return f'Load balancer {load_balancer} has no listeners: nothing to do'


class LoadBalancerSessionMixin:
    """
    Build :py:class:`LoadBalancerSession` objects using our command line
    flags and the ``albroute:`` section of albroute.yml.
    """

    def global_config(self, key: str, default: Any = None) -> Any:
        return self.app.albroute_global_config(key, default)  # type: ignore[attr-defined]

    def domain_override(self) -> Optional[str]:
        """
        In order: ``--domain``, then ``$LOADBALANCER_DOMAIN``, then
        ``albroute.domain`` from albroute.yml.  If none of them is usable we
        return ``None`` and the session uses the certificate domain.
        """
        lookups = [
            lambda: self.app.pargs.domain,  # type: ignore[attr-defined]
            lambda: os.environ.get('LOADBALANCER_DOMAIN'),
            lambda: self.global_config('domain'),
        ]
        for lookup in lookups:
            domain = lookup()
            if usable_domain(domain):
                return domain
        return None

    def get_session(self, name: Optional[str] = None) -> LoadBalancerSession:
        if not name:
            name = self.global_config('load_balancer')
        if not name:
            raise SchemaException('No load balancer given and no albroute.load_balancer in albroute.yml')
        max_pages = self.global_config('max_pages')
        session = LoadBalancerSession(
            name,
            domain_override=self.domain_override(),
            log=self.app.log,  # type: ignore[attr-defined]
            max_pages=int(max_pages) if max_pages else None
        )
        return session.load()

    def target_group_arn(self, session: LoadBalancerSession, target_group: str) -> str:
        if target_group.startswith('arn:'):
            return target_group
        return session.get_target_group_arn(target_group)


LOAD_BALANCER_ARGUMENT = (
    ['load_balancer'],
    {
        'help': 'Load balancer name or ARN.  Defaults to albroute.load_balancer from albroute.yml',
        'nargs': '?',
        'default': None
    }
)


class LoadBalancerCommands(LoadBalancerSessionMixin, Controller):

    class Meta:
        label = 'alb-commands'
        stacked_on = 'base'
        stacked_type = 'embedded'

    info_template: str = 'detail--loadbalancer.jinja2'
    rules_template: str = 'detail--rules.jinja2'
    deploy_template: str = 'detail--deploy.jinja2'

    @ex(
        help="Show the identity, domain and listeners of a load balancer",
        arguments=[LOAD_BALANCER_ARGUMENT]
    )
    @handle_model_exceptions
    def info(self) -> None:
        session = self.get_session(self.app.pargs.load_balancer)
        self.app.render({'obj': session}, template=self.info_template)

    @ex(
        help="Show the highest rule priority on a load balancer and the next free one",
        arguments=[LOAD_BALANCER_ARGUMENT]
    )
    @handle_model_exceptions
    def priority(self) -> None:
        session = self.get_session(self.app.pargs.load_balancer)
        highest = session.highest_priority()
        self.app.print('{}: {}'.format(click.style('Reference listener', fg='cyan'), session.reference_listener.arn))
        self.app.print('{}: {}'.format(click.style('Highest priority', fg='cyan'), highest))
        self.app.print('{}: {}'.format(click.style('Next priority', fg='cyan'), highest + 1))

    @ex(
        help="List the rules on each listener of a load balancer",
        arguments=[LOAD_BALANCER_ARGUMENT]
    )
    @handle_model_exceptions
    def rules(self) -> None:
        session = self.get_session(self.app.pargs.load_balancer)
        session.load_rules_snapshot()
        self.app.render({'obj': session}, template=self.rules_template)

    @ex(
        help="Create a rule forwarding to a target group on some or all listeners",
        label='create-rule',
        arguments=[
            (['load_balancer'], {'help': 'Load balancer name or ARN'}),
            (['target_group'], {'help': 'Target group name or ARN'}),
            (
                ['rule_type'],
                {'help': 'The kind of rule', 'choices': ['pathPattern', 'hostname', 'combined']}
            ),
            (
                ['values'],
                {'help': 'Rule values: a path, a hostname, or a path and a hostname', 'nargs': '+'}
            ),
            (
                ['--protocol'],
                {
                    'help': 'Only add the rule to listeners with this protocol.  Repeatable.',
                    'action': 'append',
                    'default': [],
                    'dest': 'protocols'
                }
            ),
            (
                ['--priority'],
                {
                    'help': 'Use this priority instead of the next free one',
                    'type': int,
                    'default': None,
                    'dest': 'priority'
                }
            ),
        ]
    )
    @handle_model_exceptions
    def create_rule(self) -> None:
        session = self.get_session(self.app.pargs.load_balancer)
        spec = session.rule_spec(self.app.pargs.rule_type, self.app.pargs.values)
        target_group_arn = self.target_group_arn(session, self.app.pargs.target_group)
        priority = self.app.pargs.priority
        if priority is None:
            priority = session.next_priority()
        if self.app.pargs.protocols:
            listener_arns = session.apply_to_listeners(
                spec,
                self.app.pargs.protocols,
                target_group_arn,
                priority=priority
            )
        else:
            listener_arns = session.apply_to_all_listeners(spec, target_group_arn, priority=priority)
        if not listener_arns:
            self.app.print(click.style(nothing_to_do_message(session.name, self.app.pargs.protocols), fg='yellow'))
            return
        self.app.print(click.style(f'Created {spec!r} at priority {priority} on:', fg='green'))
        for arn in listener_arns:
            self.app.print(f'  {arn}')

    @ex(
        help="Find the rule on a listener that forwards to a target group under some conditions",
        label='find-rule',
        arguments=[
            (['load_balancer'], {'help': 'Load balancer name or ARN'}),
            (['listener'], {'help': 'Listener ARN'}),
            (['target_group'], {'help': 'Target group name or ARN'}),
            (
                ['--condition'],
                {
                    'help': 'A field=value pair the rule must match, e.g. path-pattern=/api/*.  Repeatable.',
                    'action': 'append',
                    'type': condition_pair,
                    'required': True,
                    'dest': 'conditions'
                }
            ),
        ]
    )
    @handle_model_exceptions
    def find_rule(self) -> None:
        session = self.get_session(self.app.pargs.load_balancer)
        target_group_arn = self.target_group_arn(session, self.app.pargs.target_group)
        fields: List[str] = [field for field, _ in self.app.pargs.conditions]
        values: List[str] = [value for _, value in self.app.pargs.conditions]
        session.load_rules_snapshot()
        rule_arn, priority = session.find_rule(self.app.pargs.listener, target_group_arn, fields, values)
        self.app.print('{}: {}'.format(click.style('Rule', fg='cyan'), rule_arn))
        self.app.print('{}: {}'.format(click.style('Priority', fg='cyan'), priority))

    @ex(
        help="Create the target group and listener rules for a service in albroute.yml",
        arguments=[
            (['service'], {'help': 'The name of the service in albroute.yml'})
        ]
    )
    @handle_model_exceptions
    def deploy(self) -> None:
        service = self.app.albroute_config.get_service(self.app.pargs.service)
        session = self.get_session(service.get('load_balancer'))
        router = ServiceRouter(session, service, log=self.app.log)
        results = router.deploy()
        self.app.render({'obj': router, 'results': results}, template=self.deploy_template)


class TargetGroupCommands(LoadBalancerSessionMixin, Controller):

    class Meta:
        label = 'target-group'
        description = 'Work with target groups'
        help = 'Work with target groups'
        stacked_on = 'base'
        stacked_type = 'nested'

    help_overrides = {
        'arn': 'Print the ARN of the target group with this name',
    }

    def _default(self):
        """
        Default action if no sub-command is passed: print the help.
        """
        self.app.args.print_help()

    @ex(
        help="Create the target group for a service in albroute.yml",
        arguments=[
            (['service'], {'help': 'The name of the service in albroute.yml'})
        ]
    )
    @handle_model_exceptions
    def create(self) -> None:
        service = self.app.albroute_config.get_service(self.app.pargs.service)
        session = self.get_session(service.get('load_balancer'))
        target_group = TargetGroup.new(service, 'albroute')
        arn = session.create_target_group(target_group)
        self.app.print(click.style(f'TargetGroup("{target_group.name}"): {arn}', fg='green'))

    @ex(
        help="Show a target group ARN",
        arguments=[
            (['name'], {'help': 'The target group name'})
        ]
    )
    @handle_model_exceptions
    def arn(self) -> None:
        self.app.print(TargetGroup.objects.get_arn_by_name(self.app.pargs.name))
