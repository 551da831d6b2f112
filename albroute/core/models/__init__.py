from .abstract import Manager, Model  # noqa:F401
from .acm import Certificate  # noqa:F401
from .elbv2 import (  # noqa:F401
    LoadBalancer,
    LoadBalancerListener,
    LoadBalancerListenerRule,
    TargetGroup,
)
