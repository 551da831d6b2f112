from collections.abc import Callable
from functools import wraps

import click

from albroute.exceptions import (
    ArgumentMismatch,
    Cancelled,
    ConfigProcessingFailed,
    InvalidRuleSpec,
    ListenerNotInSnapshot,
    LookupFailed,
    MultipleObjectsReturned,
    NoSuchConfigSection,
    NoSuchConfigSectionItem,
    ObjectDoesNotExist,
    OperationFailed,
    SchemaException,
)

# ========================
# Decorators
# ========================

def handle_model_exceptions(func: Callable) -> Callable:
    """
    This decorator catches all the kinds of exceptions we expect to see in normal
    operation while letting others display their stack traces normally.  The
    message is printed in red and the app exits non-zero.

    We use this decorator to wrap cement command methods on
    :py:class:`cement.ext.ext_argparse.ArgparseController` subclasses.
    """

    @wraps(func)
    def inner(self, *args, **kwargs):
        try:
            obj = func(self, *args, **kwargs)
        except (
            ObjectDoesNotExist,
            MultipleObjectsReturned,
            OperationFailed,
            LookupFailed,
            InvalidRuleSpec,
            ArgumentMismatch,
            ListenerNotInSnapshot,
            Cancelled,
            SchemaException,
            ConfigProcessingFailed,
            NoSuchConfigSection,
        ) as e:
            self.app.print(click.style(str(e), fg="red"))
            self.app.exit_code = 1
        except NoSuchConfigSectionItem as e:
            lines = []
            lines.append(click.style(f"ERROR: {e!s}", fg="red"))
            lines.append(click.style(f'Available items in the "{e.section}:" section of albroute.yml:', fg="cyan"))
            for item in self.app.albroute_config.get_section(e.section):
                lines.append("  {}".format(item["name"]))
            lines.append("")
            self.app.print("\n".join(lines))
            self.app.exit_code = 1
        else:
            return obj
    return inner
