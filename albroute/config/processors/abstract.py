from typing import Dict, Any, List, Union, TYPE_CHECKING

from albroute.exceptions import ConfigProcessingFailed

if TYPE_CHECKING:
    from albroute.config import Config


class AbstractConfigProcessor:
    """
    A base class for processors for our ``albroute.yml`` file.  These
    processors modify the ``albroute.yml`` file contents in some way before
    the rest of ``albroute`` consumes it.

    Args:
        config: the :py:class:`albroute.config.Config` object we're working
            with
        context: a dict of additional data that we might use when processing the
            config
    """

    class ProcessingFailed(ConfigProcessingFailed):
        pass

    #: The replacement strings we support in ``${env.VAR}`` names
    REPLACEMENTS: List[str] = [
        '{name}',
        '{environment}',
        '{load-balancer}',
    ]

    def __init__(self, config: "Config", context: Dict[str, Any]):
        self.config = config
        self.context = context
        #: section name -> item name -> replacement -> value
        self.lookups: Dict[str, Dict[str, Dict[str, str]]] = {}
        self.extract_replacements()

    def extract_replacements(self) -> None:
        for section_name in self.config.processable_sections:
            self.lookups[section_name] = {}
            for item in self.config.cooked.get(section_name, []) or []:
                replacements = {
                    '{name}': item['name'],
                    '{environment}': item.get('environment', 'prod'),
                }
                if 'load_balancer' in item:
                    replacements['{load-balancer}'] = item['load_balancer']
                self.lookups[section_name][item['name']] = replacements
        self.lookups[self.config.GLOBAL_SECTION] = {self.config.GLOBAL_SECTION: {}}

    def get_replacements(self, section_name: str, item_name: str) -> Dict[str, str]:
        """
        Return all known replacements for item ``item_name`` in section
        ``section_name``.

        Example::

            services:
                - name: foobar-test
                  environment: test
                  load_balancer: my-alb

            processor.get_replacements('services', 'foobar-test')

            {
                '{name}': 'foobar-test',
                '{environment}': 'test',
                '{load-balancer}': 'my-alb',
            }
        """
        return self.lookups[section_name][item_name]

    def replace(
        self,
        obj: Union[List, Dict],
        key: Union[str, int],
        value: str,
        section_name: str,
        item_name: str
    ) -> None:
        """
        Perform string replacements on ``value``, which is ``obj[key]``.
        """
        raise NotImplementedError

    def __process(self, obj: Any, key: Union[str, int], value: Any, section_name: str, item_name: str) -> None:
        if isinstance(value, dict):
            self.__process_dict(value, section_name, item_name)
        elif isinstance(value, (list, tuple)):
            self.__process_list(value, section_name, item_name)
        elif isinstance(value, str):
            self.replace(obj, key, value, section_name, item_name)

    def __process_list(self, obj: List[Any], section_name: str, item_name: str) -> None:
        for i, value in enumerate(obj):
            self.__process(obj, i, value, section_name, item_name)

    def __process_dict(self, obj: Dict[str, Any], section_name: str, item_name: str) -> None:
        for key, value in list(obj.items()):
            self.__process(obj, key, value, section_name, item_name)

    def process(self) -> None:
        """
        Run our replacements on every item in each of
        :py:attr:`albroute.config.Config.processable_sections`, and on the
        global ``albroute:`` section.  The results end up in
        :py:attr:`albroute.config.Config.cooked`.

        Raises:
            AbstractConfigProcessor.ProcessingFailed: something went wrong
        """
        cooked = self.config.cooked
        for section_name in self.config.processable_sections:
            for item in cooked.get(section_name, []) or []:
                self.__process_dict(item, section_name, item['name'])
        global_section = cooked.get(self.config.GLOBAL_SECTION)
        if global_section:
            self.__process_dict(global_section, self.config.GLOBAL_SECTION, self.config.GLOBAL_SECTION)
