import threading
from collections.abc import Iterator, Sequence
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Optional,
    Protocol,
)

if TYPE_CHECKING:
    from albroute.core.models import (
        Certificate,
        LoadBalancer,
        LoadBalancerListener,
        LoadBalancerListenerRule,
        TargetGroup,
    )


class SupportsLog(Protocol):
    """
    Anything we can log to: cement's log handler, a cement ``minimal_logger``
    or a plain ``logging.Logger``.  We only ever pass one preformatted string.
    """

    def debug(self, msg: str) -> None:
        ...

    def info(self, msg: str) -> None:
        ...

    def warning(self, msg: str) -> None:
        ...

    def error(self, msg: str) -> None:
        ...


class LoadBalancerDirectory(Protocol):

    def get_by_name(self, name: str) -> "LoadBalancer":
        ...


class ListenerDirectory(Protocol):

    def list(self, load_balancer: str) -> Sequence["LoadBalancerListener"]:
        ...


class CertificateDirectory(Protocol):

    def get(self, pk: str, **_) -> "Certificate":
        ...


class RuleDirectory(Protocol):

    def pages(
        self,
        listener_arn: str,
        max_pages: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ) -> Iterator[List["LoadBalancerListenerRule"]]:
        ...

    def list(
        self,
        listener_arn: str = None,
        max_pages: Optional[int] = None,
        cancel: Optional[threading.Event] = None
    ) -> Sequence["LoadBalancerListenerRule"]:
        ...

    def create(
        self,
        listener_arn: str,
        priority: int,
        conditions: List[Dict[str, Any]],
        target_group_arn: str
    ) -> str:
        ...


class TargetGroupDirectory(Protocol):

    def create(self, obj: "TargetGroup") -> str:
        ...

    def get_arn_by_name(self, name: str) -> str:
        ...
