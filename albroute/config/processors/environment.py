import errno
import os
import os.path
import re
from typing import Dict, Any, Optional, Union, TYPE_CHECKING

from .abstract import AbstractConfigProcessor

if TYPE_CHECKING:
    from albroute.config import Config


class EnvironmentConfigProcessor(AbstractConfigProcessor):
    """
    Replace ``${env.VAR}`` in string values with the value of ``VAR``.

    Values are looked up first in the ``env_file`` named by the item itself
    (a service entry or the ``albroute:`` section), then in the ``env_file``
    from our context, then in ``os.environ`` if ``import_env`` is set.

    ``VAR`` may use the replacements in
    :py:attr:`AbstractConfigProcessor.REPLACEMENTS`; it is upper cased and has
    dashes turned into underscores before we look it up.
    """

    ENVIRONMENT_RE = re.compile(r'\$\{env\.(?P<key>[A-Za-z0-9_{}-]+)\}')

    #: What we substitute for a missing variable when ``ignore_missing_environment`` is set
    MISSING_VALUE: str = 'NOT-IN-ENVIRONMENT'

    def __init__(self, config: "Config", context: Dict[str, Any]):
        super().__init__(config, context)
        self.environ: Dict[str, str] = {}
        self.per_item_environ: Dict[str, Dict[str, Dict[str, str]]] = {}
        if 'env_file' in self.context:
            self.environ.update(self._load_env_file(self.context['env_file']))
        if self.context.get('import_env', False):
            self.environ.update(os.environ)

    @property
    def ignore_missing(self) -> bool:
        return bool(self.context.get('ignore_missing_environment', False))

    def _load_env_file(self, filename: Optional[str]) -> Dict[str, str]:
        if not filename:
            return {}
        if not os.path.exists(filename):
            if not self.ignore_missing:
                raise self.ProcessingFailed('Environment file "{}" does not exist'.format(filename))
            return {}
        if not os.path.isfile(filename):
            if not self.ignore_missing:
                raise self.ProcessingFailed('Environment file "{}" is not a regular file'.format(filename))
            return {}
        try:
            with open(filename, encoding='utf-8') as f:
                raw_lines = f.readlines()
        except IOError as e:
            if e.errno == errno.EACCES and self.ignore_missing:
                return {}
            raise self.ProcessingFailed('Environment file "{}" is not readable'.format(filename))
        # Strip the comments and empty lines
        lines = [x.strip() for x in raw_lines if x.strip() and not x.strip().startswith("#")]
        environment = {}
        for line in lines:
            # split on the first "="
            parts = str.split(line, '=', 1)
            if len(parts) == 2:
                environment[parts[0].strip()] = parts[1].strip()
        return environment

    def item_env_file(self, section_name: str, item_name: str) -> Optional[str]:
        """
        Return the ``env_file`` named by an item.  Relative paths are relative
        to the directory holding our albroute.yml.
        """
        if section_name == self.config.GLOBAL_SECTION:
            filename = (self.config.cooked.get(section_name) or {}).get('env_file', None)
        else:
            filename = self.config.get_section_item(section_name, item_name).get('env_file', None)
        if filename and not os.path.isabs(filename):
            filename = os.path.join(os.path.dirname(os.path.abspath(self.config.filename)), filename)
        return filename

    def load_per_item_environment(self, section_name: str, item_name: str) -> None:
        section = self.per_item_environ.setdefault(section_name, {})
        if item_name not in section:
            section[item_name] = self._load_env_file(self.item_env_file(section_name, item_name))

    def lookup(self, envkey: str, section_name: str, item_name: str) -> str:
        try:
            return self.per_item_environ[section_name][item_name][envkey]
        except KeyError:
            pass
        try:
            return self.environ[envkey]
        except KeyError:
            if not self.ignore_missing:
                raise self.ProcessingFailed(
                    'Config["{}"]["{}"]: Could not find value for ${{env.{}}}'.format(
                        section_name,
                        item_name,
                        envkey
                    )
                )
        return self.MISSING_VALUE

    def replace(self, obj: Any, key: Union[str, int], value: Any, section_name: str, item_name: str) -> None:
        if not self.ENVIRONMENT_RE.search(value):
            return
        self.load_per_item_environment(section_name, item_name)
        replacers = self.get_replacements(section_name, item_name)

        def substitute(m: "re.Match") -> str:
            envkey = m.group('key')
            for replace_str, replace_value in list(replacers.items()):
                envkey = envkey.replace(replace_str, replace_value)
            envkey = envkey.upper().replace('-', '_')
            return self.lookup(envkey, section_name, item_name)

        obj[key] = self.ENVIRONMENT_RE.sub(substitute, value)
