from .table import TableRenderer, ListenerTableRenderer, RuleTableRenderer  # noqa:F401
from .misc import rule_conditions  # noqa:F401
