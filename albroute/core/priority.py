"""
Find the highest rule priority in use on a listener.

We only ever look at one listener, the first one the load balancer reports,
and treat its priorities as the priorities for the whole load balancer.  If
your listeners carry unrelated rule sets, the priority we pick for a new rule
may still collide on one of the other listeners; the create will then fail
with ``PriorityInUse``.
"""
import threading
from typing import Any, Optional, TYPE_CHECKING

from cement.utils.misc import minimal_logger

if TYPE_CHECKING:
    from albroute.types import RuleDirectory, SupportsLog


def parse_priority(value: Any) -> int:
    """
    Convert a rule priority as AWS reports it (a string) into an int.  The
    default rule has priority ``"default"``; that and anything else we can't
    parse counts as 0.
    """
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def highest_priority(
    listener_arn: str,
    rules: "RuleDirectory",
    log: "SupportsLog" = None,
    max_pages: Optional[int] = None,
    cancel: Optional[threading.Event] = None
) -> int:
    """
    Page through every rule on ``listener_arn`` and return the largest priority
    we saw, or 0 if the listener has no rules.  Create new rules at
    ``highest_priority(...) + 1``.

    Args:
        listener_arn: the reference listener
        rules: where we get rule pages from

    Keyword Args:
        log: where to send debug messages
        max_pages: give up after this many pages
        cancel: if this gets set, stop before the next page

    Raises:
        Cancelled: ``cancel`` was set
        PaginationLimitExceeded: the listener had more than ``max_pages``
            pages of rules
    """
    if log is None:
        log = minimal_logger(__name__)
    highest = 0
    for page in rules.pages(listener_arn, max_pages=max_pages, cancel=cancel):
        for rule in page:
            priority = parse_priority(rule.raw_priority)
            if priority > highest:
                log.debug(f'Found rule with priority: {priority}')
                highest = priority
    log.debug(f'Highest rule priority on {listener_arn}: {highest}')
    return highest
