import os

from cement.utils.version import get_version_banner

from albroute import get_version
from albroute.ext.ext_albroute_argparse import AlbRouteArgparseController as Controller


VERSION_BANNER = """
albroute-%s: Manage routing rules on AWS application load balancers
---
%s
""" % (get_version(), get_version_banner())


def filename_envvar(s):
    if 'ALBROUTE_CONFIG_FILE' in os.environ:
        return os.environ['ALBROUTE_CONFIG_FILE']
    return s


class Base(Controller):
    class Meta:
        label = 'base'

        # text displayed at the top of --help output
        description = 'albroute: Manage routing rules on AWS application load balancers'

        # controller level arguments. ex: 'albroute --version'
        arguments = [
            ### add a version banner
            (['-v', '--version'], {'action' : 'version', 'version' : VERSION_BANNER}),
            (
                ['-f', '--filename'],
                {
                    'dest': 'albroute_filename',
                    'action': 'store',
                    'default': 'albroute.yml',
                    'help': 'Path to the albroute config file',
                    'type': filename_envvar
                }
            ),
            (
                ['--no-use-aws-section'],
                {
                    'action' : 'store_true',
                    'dest': 'no_use_aws_section',
                    'default': False,
                    'help': 'Ignore the aws: section in albroute.yml'
                }
            ),
            (
                ['-e', '--env_file'],
                {
                    'dest': 'env_file',
                    'action': 'store',
                    'default': None,
                    'help': 'Path to an environment file to use for ${env.VAR} replacements'
                }
            ),
            (
                ['--ignore-missing-environment'],
                {
                    'dest': 'ignore_missing_environment',
                    'action': 'store_true',
                    'default': False,
                    'help': "Don't stop processing albroute.yml if we can't dereference an ${env.VAR}"
                }
            ),
            (
                ['--domain'],
                {
                    'dest': 'domain',
                    'action': 'store',
                    'default': None,
                    'help': (
                        'Use this domain for hostname rules instead of the one on the listener certificate.  '
                        'Defaults to $LOADBALANCER_DOMAIN, then albroute.domain from albroute.yml'
                    )
                }
            ),
        ]


    def _default(self):
        """Default action if no sub-command is passed."""
        self.app.args.print_help()
