from .base import Base  # noqa: F401
from .alb import (  # noqa: F401
    LoadBalancerCommands,
    TargetGroupCommands,
)
