from typing import Dict, Any, Callable, Tuple

from albroute.exceptions import SchemaException as BaseSchemaException


class Adapter:
    """
    Given a dict of data from a config source, convert it to the data
    structures we use to initialize an albroute model.

    Minimally this means translating the source data into the data structure
    returned by an appropriate ``describe_*`` AWS API call.
    """

    NONE: str = 'albroute:required'

    class SchemaException(BaseSchemaException):
        """
        Raise this if data in the config source does not validate properly.
        """
        pass

    def __init__(self, data: Dict[str, Any], partial: bool = False, **kwargs) -> None:
        self.data: Dict[str, Any] = data
        self.partial: bool = partial

    def set(
        self,
        data: Dict[str, Any],
        source_key: str,
        dest_key: str = None,
        default: Any = NONE,
        optional: bool = False,
        convert: Callable = None
    ):
        if dest_key is None:
            dest_key = source_key
        if self.partial or optional:
            if source_key in self.data:
                data[dest_key] = self.data[source_key]
        else:
            if default != self.NONE:
                data[dest_key] = self.data.get(source_key, default)
            else:
                try:
                    data[dest_key] = self.data[source_key]
                except KeyError:
                    raise self.SchemaException(f'{self.__class__.__name__}: "{source_key}" is required')
        if dest_key in data and convert:
            data[dest_key] = convert(data[dest_key])

    def convert(self) -> Tuple[Any, Dict[str, Any]]:
        """
        This method is the meat of the adapter: it takes ``self.data`` and
        returns the data structures needed to initialize our model.
        """
        raise NotImplementedError
