from copy import deepcopy
from textwrap import wrap
from typing import Dict, Any, List, Optional, Union, cast

import click
from tabulate import tabulate

from albroute.exceptions import RenderException

from albroute.core.models import LoadBalancerListener, LoadBalancerListenerRule
from .misc import rule_conditions


Column = Union[Dict[str, Any], str]


# ========================
# Renderers
# ========================

class TableRenderer:
    """
    Render a list of results as an ASCII table.
    """

    DEFAULT_FLOAT_PRECISION: int = 2

    def __init__(
        self,
        columns: Dict[str, Any],
        float_precision: int = None,
        ordering: str = None,
        tablefmt: str = 'simple',
        show_headers: bool = True
    ):
        """
        `columns` is a dict that determines the structure of the table, like so:

            {
                'Port': 'port',
                'Protocol': 'protocol',
                'ARN': 'arn',
            }

        The keys of `columns` will be used as the column header in the table, and the values in `columns`
        are the names of the attributes on our result objects that contain the data we want to render for that
        column.

        If the value has double underscores in it, e.g. "listener__port", this instructs ``TableRenderer`` to
        look at an attribute/key on a sub-object.

        You can configure per column configuration by setting the value of the column to a dict, like so::

            {
                'Rules': {
                    'key': 'rules',
                    'length': True
                }
            }

        Options:

            * ``default``:  If the attribute/key is not present in our object, return the default value instead of
                            raising an exception.
            * ``wrap``: Wrap the value to the specified number of columns
            * ``length``: Just render the length of the value.  Useful for counting sub-objects

        If we have a method named ``render_{key}_value``, we call that to get the value for the column instead.

        :param columns dict(str, str): a dict that determines the structure of the table
        :param float_precision Union[int, None]: if specified, use this to determine the decimal precision
                                                 of any `float` objects we get
        :param ordering Union[str, None]: sort by the column with this header; prefix with "-" to reverse
        :param tablefmt str: provide this to tabulate() to determine the table format
        """
        super().__init__()
        assert isinstance(columns, dict), 'TableRenderer: `columns` parameter to __init__ should be a dict'

        self.columns: List[Column] = list(columns.values())
        self.headers: List[str] = list(columns.keys())
        self.float_precision: int = float_precision if float_precision else self.DEFAULT_FLOAT_PRECISION
        self.float_format: str = '{{:.{}f}}'.format(self.float_precision)
        self.ordering: Optional[str] = ordering
        self.tablefmt: str = tablefmt
        self.show_headers: bool = show_headers

    @staticmethod
    def column_key(column: Column) -> str:
        if isinstance(column, dict):
            return column['key']
        return column

    def get_value(self, obj: Any, column: Column) -> Any:
        data_key = self.column_key(column)
        try:
            return getattr(obj, data_key)
        except AttributeError:
            try:
                return obj.render_for_display()[data_key]
            except KeyError:
                pass
            except AttributeError:
                # Not a Model, so probably a bare dict
                try:
                    return obj[data_key]
                except (KeyError, TypeError):
                    pass
        if isinstance(column, dict) and 'default' in column:
            return column['default']
        raise RenderException(
            click.style(
                '\n\n{our_name}: Could not dereference "{key}"'.format(our_name=self.__class__.__name__, key=data_key),
                fg='red'
            )
        )

    def cast_column(self, value: Any, column: Column) -> Any:
        """
        Try to reformat a value into a more human friendly form.
        """
        if value == '':
            return value
        if isinstance(column, dict):
            if column.get('length'):
                return str(len(value))
            if 'wrap' in column:
                return '\n'.join(wrap(str(value), cast(int, column['wrap'])))
        if isinstance(value, float):
            return self.float_format.format(value)
        if isinstance(value, (list, tuple)):
            return '\n'.join(str(v) for v in value)
        return value

    def render_column(self, obj: Any, column: Column) -> Any:
        """
        Return the value to put in the table for the attribute named `column` on `obj`, a data object.
        """
        key = self.column_key(column)
        if hasattr(self, f'render_{key}_value'):
            return getattr(self, f'render_{key}_value')(obj, key, column)
        if '__' in key:
            for ref in key.split('__'):
                if isinstance(column, dict):
                    sub_column = cast(Dict[str, Any], deepcopy(column))
                    sub_column['key'] = ref
                    obj = self.get_value(obj, sub_column)
                else:
                    obj = self.get_value(obj, ref)
            return self.cast_column(obj, column)
        return self.cast_column(self.get_value(obj, column), column)

    def render(self, data: Any, **_) -> str:
        data = cast(List[Any], data)
        table = []
        for obj in data:
            table.append([self.render_column(obj, column) for column in self.columns])
        if self.ordering:
            reverse = False
            order_column = self.ordering
            if order_column.startswith('-'):
                reverse = True
                order_column = order_column[1:]
            order_index = self.headers.index(order_column)
            table = sorted(table, key=lambda x: x[order_index], reverse=reverse)
        if self.show_headers:
            return tabulate(table, headers=self.headers, tablefmt=self.tablefmt)
        return tabulate(table, tablefmt=self.tablefmt)


class ListenerTableRenderer(TableRenderer):

    def render_certificates_value(self, obj: LoadBalancerListener, key: str, column: Column) -> str:
        certs = []
        for cert in obj.data.get('Certificates', []):
            arn = cert['CertificateArn']
            arn_source = click.style(arn.split(':')[2].upper(), fg='yellow')
            arn_id = arn.rsplit('/', 1)[-1]
            arn_string = '{}: {}'.format(arn_source, arn_id)
            if cert.get('IsDefault'):
                certs.append('[Default] {}'.format(arn_string))
            else:
                certs.append(arn_string)
        return '\n'.join(certs)


class RuleTableRenderer(TableRenderer):
    """
    Render :py:class:`albroute.core.models.LoadBalancerListenerRule` objects.
    The listener's default rule sorts last.
    """

    def render_conditions_value(self, obj: LoadBalancerListenerRule, key: str, column: Column) -> str:
        return rule_conditions(obj)

    def render_target_group_arns_value(self, obj: LoadBalancerListenerRule, key: str, column: Column) -> str:
        arns = obj.target_group_arns
        if not arns:
            return ', '.join(a.get('Type', '') for a in obj.actions)
        return '\n'.join(arn.rsplit(':', 1)[-1] for arn in arns)

    def render(self, data: Any, **kwargs) -> str:
        rules = sorted(data, key=lambda r: (r.is_default, r.priority))
        return super().render(rules, **kwargs)
