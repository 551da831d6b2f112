from copy import deepcopy
import threading
from typing import Callable, List, Any, Dict, Iterable, Iterator, Optional, Sequence

import botocore.exceptions

from albroute.core.aws import get_boto3_session
from albroute.exceptions import (
    Cancelled,
    LookupFailed as BaseLookupFailed,
    MultipleObjectsReturned as BaseMultipleObjectsReturned,
    ObjectDoesNotExist,
    OperationFailed as BaseOperationFailed,
    PaginationLimitExceeded,
)
from albroute.registry import importer_registry


#: Stop paging after this many pages unless told otherwise
DEFAULT_MAX_PAGES: int = 100

#: What a failed boto3 call can raise: an error response from AWS, or a failure
#: to talk to AWS at all (no credentials, no connection, ...)
AWS_ERRORS = (botocore.exceptions.ClientError, botocore.exceptions.BotoCoreError)


def error_code(e: Exception) -> str:
    """
    Return the AWS error code for ``e``, or the exception class name if AWS
    never answered.
    """
    if isinstance(e, botocore.exceptions.ClientError):
        return e.response.get('Error', {}).get('Code', 'Unknown')
    return e.__class__.__name__


def guard_pages(
    responses: Iterable[Dict[str, Any]],
    what: str,
    max_pages: Optional[int] = None,
    cancel: Optional[threading.Event] = None
) -> Iterator[Dict[str, Any]]:
    """
    Pass through the pages of a boto3 paginator, checking ``cancel`` before
    each page is requested and giving up once AWS has handed us more than
    ``max_pages`` pages.

    Raises:
        Cancelled: ``cancel`` was set
        PaginationLimitExceeded: there were more than ``max_pages`` pages
    """
    if max_pages is None:
        max_pages = DEFAULT_MAX_PAGES
    iterator = iter(responses)
    count = 0
    while True:
        if cancel is not None and cancel.is_set():
            raise Cancelled(f'{what}: cancelled after {count} pages')
        try:
            response = next(iterator)
        except StopIteration:
            return
        count += 1
        if count > max_pages:
            raise PaginationLimitExceeded(f'{what}: gave up after {max_pages} pages of results')
        yield response


class Manager:

    service: str

    def __init__(self):
        self._client = None

    @property
    def client(self):
        if self.service:
            self._client = get_boto3_session().client(self.service)
        else:
            self._client = None
        return self._client

    def get(self, pk: str, **_) -> "Model":
        raise NotImplementedError

    def get_many(self, pks: List[str], **_) -> Sequence["Model"]:
        raise NotImplementedError

    list: Callable[..., Sequence["Model"]]


class Model:

    objects: Manager
    adapters = importer_registry

    class DoesNotExist(ObjectDoesNotExist):
        """
        We tried to get a single object but it does not exist in AWS.
        """
        pass

    class MultipleObjectsReturned(BaseMultipleObjectsReturned):
        """
        We expected to retrieve only one object but got multiple objects.
        """
        pass

    class OperationFailed(BaseOperationFailed):
        """
        We did a call to AWS we expected to succeed, but it failed.
        """
        pass

    class LookupFailed(BaseLookupFailed):
        """
        A describe call to AWS errored for some reason other than "not found".
        """
        pass

    @classmethod
    def adapt(cls, obj: Dict[str, Any], source: str, **kwargs):
        """
        Given an appropriate bit of data ``obj`` from a data source ``source``,
        return the args and kwargs for the :py:meth:`new` factory method.  This
        means: take the data in ``obj`` and convert it to look like the dict
        AWS returns when we describe a single object of this type.

        .. note::

            At this time, the only valid ``source`` is ``albroute``, and so all
            ``obj`` will be bits of parsed albroute.yml data.
        """
        adapter = cls.adapters.get(cls.__name__, source)(obj, **kwargs)
        data, data_kwargs = adapter.convert()
        return data, data_kwargs

    @classmethod
    def new(cls, obj: Dict[str, Any], source: str, **kwargs) -> "Model":
        """
        This is a factory method.

        .. note::

            The ``**kwargs`` here is for the Adapter to use, not for the Model
            constructor.
        """
        data, model_kwargs = cls.adapt(obj, source, **kwargs)
        return cls(data, **model_kwargs)

    def __init__(self, data: Dict[str, Any]) -> None:
        self.data = data

    @property
    def pk(self):
        raise NotImplementedError

    @property
    def name(self):
        raise NotImplementedError

    @property
    def arn(self):
        raise NotImplementedError

    def render_for_display(self) -> Dict[str, Any]:
        return self.render()

    def render_for_create(self) -> Dict[str, Any]:
        return self.render()

    def render(self) -> Dict[str, Any]:
        data = deepcopy(self.data)
        return data

    def __eq__(self, other) -> bool:
        if self.__class__ != other.__class__:
            return False
        return self.render() == other.render()

    def __str__(self) -> str:
        return '{}(pk="{}")'.format(self.__class__.__name__, self.pk)
