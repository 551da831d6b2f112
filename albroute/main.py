import os
import traceback
from typing import Any, Optional, Dict

import click
from cement import App, init_defaults
from cement.core.exc import CaughtSignal

import albroute.core.adapters  # noqa:F401,F403  # pylint:disable=unused-import

from .config import Config, set_app
from .controllers import (
    Base,
    LoadBalancerCommands,
    TargetGroupCommands,
)
from .core.aws import build_boto3_session
from .exceptions import AlbRouteAppError

# configuration defaults
CONFIG = init_defaults('albroute')
META = init_defaults('log.logging')
META['log.logging']['log_level_argument'] = ['-l', '--level']


def ignore_missing_environment(pargs: Any) -> bool:
    """
    ``--ignore-missing-environment`` or ``ALBROUTE_IGNORE_MISSING_ENVIRONMENT=true``
    lets albroute.yml load even when some ``${env.VAR}`` can't be found.
    """
    if getattr(pargs, 'ignore_missing_environment', False):
        return True
    return os.environ.get('ALBROUTE_IGNORE_MISSING_ENVIRONMENT', 'false').lower() == 'true'


def config_kwargs(pargs: Any) -> Dict[str, Any]:
    """
    Turn our parsed command line into the kwargs for :py:meth:`Config.new`.
    """
    return {
        'filename': pargs.albroute_filename,
        'env_file': pargs.env_file,
        'ignore_missing_environment': ignore_missing_environment(pargs),
    }


def post_arg_parse_build_boto3_session(app: "AlbRouteApp") -> None:
    """
    Build the boto3 session all our managers use before any command runs.
    The ``aws:`` section of albroute.yml is read raw, without ``${env.VAR}``
    interpolation.
    """
    app.log.debug(f'building boto3 session from {app.pargs.albroute_filename}')
    build_boto3_session(
        app.pargs.albroute_filename,
        use_aws_section=not app.pargs.no_use_aws_section
    )


def report_error(app: "AlbRouteApp", label: str, e: Exception) -> None:
    app.print(click.style(f'{label} > {e}', fg='red'))
    app.exit_code = 1
    if app.debug is True:
        traceback.print_exc()


# ------------------
# The cement app
# ------------------

class AlbRouteApp(App):
    """albroute primary application."""

    class Meta:
        label = 'albroute'

        config_defaults = CONFIG
        meta_defaults = META

        # call sys.exit() on close
        exit_on_close = True

        # load additional framework extensions
        extensions = [
            # cement extensions
            'yaml',
            'colorlog',
            'jinja2',
            'print',
            # albroute extensions
            'albroute.ext.ext_albroute_argparse',
            'albroute.ext.ext_albroute_jinja2',
        ]

        # configuration handler
        config_handler = 'yaml'

        # configuration file suffix
        config_file_suffix = '.yml'

        # handlers
        log_handler = 'colorlog'
        output_handler = 'albroute_jinja2'

        # where do our templates live?
        template_module = 'albroute.templates'
        # how do we want to render our templates?
        template_handler = 'albroute_jinja2'

        # register handlers
        handlers = [
            Base,
            LoadBalancerCommands,
            TargetGroupCommands,
        ]

        # register hooks
        hooks = [
            ('post_argument_parsing', post_arg_parse_build_boto3_session)
        ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._albroute_config: Optional[Config] = None

    @property
    def albroute_config(self) -> Config:
        """
        Lazy load the ``albroute.yml`` file.  We only load it on request because
        only some commands need it.

        Returns:
            The fully interpolated Config object.
        """
        if not self._albroute_config:
            self._albroute_config = Config.new(**config_kwargs(self.pargs))
        return self._albroute_config

    def albroute_global_config(self, key: str, default: Any = None) -> Any:
        """
        Return ``key`` from the ``albroute:`` section of albroute.yml, or
        ``default`` if we have no albroute.yml at all.
        """
        if not os.path.exists(self.pargs.albroute_filename):
            return default
        return self.albroute_config.get_global_config(key, default)


# ==========================================
# entrypoint
# ==========================================


def main():
    with AlbRouteApp() as app:
        set_app(app)
        try:
            app.run()

        except AssertionError as e:
            report_error(app, 'AssertionError', e)

        except AlbRouteAppError as e:
            report_error(app, e.__class__.__name__, e)

        except CaughtSignal as e:
            # Default Cement signals are SIGINT and SIGTERM, exit 0 (non-error)
            print('\n%s' % e)
            app.exit_code = 0


if __name__ == '__main__':
    main()
