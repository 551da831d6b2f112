from typing import Dict, Any, List

import click
from cement.utils.misc import minimal_logger
from cement.core.output import OutputHandler
from cement.ext.ext_jinja2 import Jinja2TemplateHandler, Jinja2OutputHandler

from albroute.core.models import LoadBalancerListener, LoadBalancerListenerRule
from albroute.renderers import TableRenderer, ListenerTableRenderer, RuleTableRenderer, rule_conditions

LOG = minimal_logger(__name__)


def color(value: str, **kwargs) -> str:
    """
    Render the string with click.style().
    """
    return click.style(str(value), **kwargs)


def section_title(value: str, **kwargs) -> str:
    """
    Render a section title from ``value``.  This looks like:

        value
        -----

    with optional click font manipulation for ``value``.
    """
    if 'fg' not in kwargs:
        kwargs['fg'] = 'cyan'
    lines = []
    lines.append(click.style(str(value), **kwargs))
    lines.append(click.style('-' * len(value), **kwargs))
    return '\n'.join(lines)


def tabular(data: List[Any], **kwargs) -> str:
    """
    Render a table.

    `kwargs` determine which columns are displayed, with the kwarg being the title of the column and the value
    being the name of the attribute on the objects to display.  Underscores in the kwarg become spaces in the
    column title.  For example::

        {{ obj.results|tabular(Listener='listener', Priority='priority', Status='status') }}

    ``<Title>_default`` sets the default for a column; ``ordering``, ``float_precision``, ``tablefmt`` and
    ``show_headers`` are passed to :py:class:`albroute.renderers.TableRenderer`.
    """
    renderer_kwargs: Dict[str, Any] = {}
    columns: Dict[str, Any] = {}
    for k, v in list(kwargs.items()):
        if k in ['ordering', 'float_precision', 'tablefmt', 'show_headers']:
            renderer_kwargs[k] = v
        elif k.endswith('_default'):
            k = k.replace('_default', '').replace('_', ' ')
            columns.setdefault(k, {})['default'] = v
        else:
            k = k.replace('_', ' ')
            columns.setdefault(k, {})['key'] = v
    renderer = TableRenderer(columns, **renderer_kwargs)
    return renderer.render(data)


def listener_table(data: List[LoadBalancerListener]) -> str:
    """
    Render a table for a list of elbv2 Listeners.
    """
    columns = {
        'Port': 'port',
        'Protocol': 'protocol',
        'Certificates': 'certificates',
        'ARN': 'arn',
    }
    renderer = ListenerTableRenderer(columns)
    return renderer.render(data)


def rule_table(data: List[LoadBalancerListenerRule]) -> str:
    """
    Render a table for the rules on one listener.
    """
    columns = {
        'Priority': 'raw_priority',
        'Conditions': 'conditions',
        'Target Groups': 'target_group_arns',
        'ARN': 'arn',
    }
    renderer = RuleTableRenderer(columns)
    return renderer.render(data)


class AlbRouteJinja2OutputHandler(Jinja2OutputHandler):
    """
    We're subclassing the cement Jinja2OutputHandler here so we can use our own
    jinja2 template handler instead of the cement default one.
    """

    class Meta:
        label = 'albroute_jinja2'

    def _setup(self, app):
        OutputHandler._setup(self, app)  # pylint: disable=protected-access
        self.templater = self.app.handler.resolve('template', 'albroute_jinja2', setup=True)


class AlbRouteJinja2TemplateHandler(Jinja2TemplateHandler):
    """
    We're subclassing the cement Jinja2TemplateHandler here so we can add some
    custom filters.
    """

    class Meta:
        label = 'albroute_jinja2'

    def load(self, *args, **kwargs):
        content, _type, _path = super().load(*args, **kwargs)
        self.env.filters['color'] = color
        self.env.filters['section_title'] = section_title
        self.env.filters['tabular'] = tabular
        self.env.filters['listener_table'] = listener_table
        self.env.filters['rule_table'] = rule_table
        self.env.filters['rule_conditions'] = rule_conditions
        return content, _type, _path


def load(app):
    app.handler.register(AlbRouteJinja2OutputHandler)
    app.handler.register(AlbRouteJinja2TemplateHandler)
