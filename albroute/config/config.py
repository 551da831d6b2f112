from copy import deepcopy
import os
from typing import Dict, Any, List, Optional
from typing import Final

import yaml

from albroute.exceptions import ConfigProcessingFailed, NoSuchConfigSection, NoSuchConfigSectionItem
from .processors import ConfigProcessor


class Config:
    """
    This class reads our ``albroute.yml`` file and handles the allowed
    variable substitutions in string values in the ``services:`` section and
    in the top level ``albroute:`` section.

    Allowed variable substitutions:

    * ``${env.<environment var>}``:  If the environment variable
      ``<environment var>`` exists in our environment (or in the env file we
      were given), replace this with the value of that environment variable.

    Args:
        filename: the path to our config file

    Keyword Args:
        raw_config: if supplied, use this as our config data instead of loading
            it from ``filename``
    """

    class NoSuchSectionError(NoSuchConfigSection):
        pass

    class NoSuchSectionItemError(NoSuchConfigSectionItem):
        pass

    #: The default name of our config file
    DEFAULT_CONFIG_FILE: Final[str] = 'albroute.yml'

    #: The name of the section with our global settings
    GLOBAL_SECTION: Final[str] = 'albroute'

    #: The list of sections in our config file that will be processed
    #: by our :py:class:`albroute.config.processors.ConfigProcessor`
    processable_sections: List[str] = [
        'services',
    ]

    @classmethod
    def new(cls, **kwargs) -> "Config":
        """
        Load and interpolate a config file.  Any kwargs besides ``filename``,
        ``raw_config`` and ``interpolate`` become the processor context
        (``env_file``, ``import_env``, ``ignore_missing_environment``).

        Raises:
            ConfigProcessingFailed: the file could not be read, or an
                interpolation failed
        """
        filename: Optional[str] = kwargs.pop('filename', cls.DEFAULT_CONFIG_FILE)
        if filename is None:
            filename = cls.DEFAULT_CONFIG_FILE
        config = cls(filename=filename, raw_config=kwargs.pop('raw_config', None))
        if kwargs.pop('interpolate', True):
            kwargs.setdefault('import_env', True)
            processor = ConfigProcessor(config, kwargs)
            processor.process()
        return config

    def __init__(self, filename: str, raw_config: Dict[str, Any] = None) -> None:
        self.filename: str = filename
        self.__raw: Dict[str, Any] = raw_config if raw_config else self.load_config(filename)
        self.__cooked: Dict[str, Any] = deepcopy(self.__raw)

    @property
    def raw(self) -> Dict[str, Any]:
        """
        Returns:
            The pre-interpolated version of the raw YAML.
        """
        return self.__raw

    @property
    def cooked(self) -> Dict[str, Any]:
        """
        Returns:
            The post-interpolated version of the raw YAML.
        """
        return self.__cooked

    @property
    def services(self) -> List[Dict[str, Any]]:
        return self.cooked.get('services', [])

    def load_config(self, filename: str) -> Dict[str, Any]:
        """
        Read our albroute.yml file from disk and return it as parsed YAML.
        """
        if not os.path.exists(filename):
            raise ConfigProcessingFailed("Couldn't find albroute config file '{}'".format(filename))
        if not os.access(filename, os.R_OK):
            raise ConfigProcessingFailed(
                "albroute config file '{}' exists but is not readable".format(filename)
            )
        with open(filename, encoding='utf-8') as f:
            return yaml.load(f, Loader=yaml.FullLoader) or {}

    def get_service(self, service_name: str) -> Dict[str, Any]:
        """
        Get the full config for the service named ``service_name``.

        Raises:
            Config.NoSuchSectionError: there is no ``services:`` section
            Config.NoSuchSectionItemError: no service named ``service_name``
        """
        return self.get_section_item('services', service_name)

    def get_section(self, section_name: str) -> List[Dict[str, Any]]:
        try:
            return self.cooked[section_name]
        except KeyError:
            raise self.NoSuchSectionError(section_name)

    def get_section_item(self, section_name: str, item_name: str) -> Dict[str, Any]:
        """
        Get an item from a top level section with ``name`` (or ``environment``)
        equal to ``item_name`` from our interpolated config.

        .. note::
            If you have several items with the same ``environment``, you'll get
            the first one in the file.
        """
        for item in self.get_section(section_name):
            if item['name'] == item_name:
                return item
            if 'environment' in item and item['environment'] == item_name:
                return item
        raise self.NoSuchSectionItemError(section_name, item_name)

    def get_global_config(self, key: str, default: Any = None) -> Any:
        return (self.cooked.get(self.GLOBAL_SECTION) or {}).get(key, default)
