from cement.ext.ext_argparse import ArgparseController
from cement.utils.misc import minimal_logger

LOG = minimal_logger(__name__)


class AlbRouteArgparseController(ArgparseController):
    """
    We use this subclass of ArgparseController instead of cement's version so that we can
    redefine help strings in subclasses of a base class.
    """

    #: The keys of this dict are method names, and the value is the string
    #: with which to replace the "help" string for that method name with
    help_overrides: dict = {}

    def _get_command_parser_options(self, command):
        """
        Look on the controller owning a command for ``help_overrides``, a dict
        whose keys are method names and whose values are help strings, like so::

            class RuleCommands(AlbRouteArgparseController):

                class Meta:
                    label = "rules"

                help_overrides = {
                    'info': 'Show the rules on a load balancer'
                }

        and use that in place of the ``help`` given to ``@ex()``.
        """
        kwargs = super()._get_command_parser_options(command)
        if 'help' in kwargs:
            controller = command['controller']
            overrides = getattr(controller, 'help_overrides', {})
            if command['func_name'] in overrides:
                kwargs['help'] = overrides[command['func_name']]
        return kwargs
