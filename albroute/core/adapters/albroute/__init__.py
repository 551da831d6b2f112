from albroute.registry import importer_registry as registry

from .elbv2 import ListenerRuleAdapter, TargetGroupAdapter

# -----------------------
# Adapter registrations
# -----------------------

# elbv2
registry.register("TargetGroup", "albroute", TargetGroupAdapter)
registry.register("RuleSpec", "albroute", ListenerRuleAdapter)
