from typing import List, Optional


class SchemaException(Exception):
    """
    There was a schema validation problem in the albroute.yml file.
    """
    pass


class LookupFailed(Exception):
    """
    A call to AWS that should have told us about something errored out.
    """
    pass


class ObjectDoesNotExist(Exception):
    """
    We tried to get a single object but it does not exist in AWS.
    """
    pass


class MultipleObjectsReturned(Exception):
    """
    We expected to retrieve only one object but got multiple objects.
    """
    pass


class AmbiguousTargetGroup(MultipleObjectsReturned):
    """
    A target group name matched more than one target group.
    """
    pass


class OperationFailed(Exception):
    """
    We tried to do something we expected to succeed, but it failed.
    """
    pass


class CertificateLookupFailed(LookupFailed):
    """
    We could not describe a certificate attached to one of our listeners.
    """
    pass


class InvalidRuleSpec(Exception):
    """
    The rule type is unknown, or it was given the wrong number of values.
    """
    pass


class ArgumentMismatch(Exception):
    """
    Two lists that must line up element for element have different lengths.
    """
    pass


class RuleCreationFailed(OperationFailed):
    """
    AWS refused to create a listener rule.  ``cause`` is the AWS error code
    (``PriorityInUse``, ``TooManyRules``, ``IncompatibleProtocols``, etc.).
    """

    def __init__(self, msg: str, cause: str = None, listener_arn: str = None, priority: int = None):
        super().__init__(msg)
        self.cause = cause
        self.listener_arn = listener_arn
        self.priority = priority


class TargetGroupCreationFailed(OperationFailed):
    """
    AWS refused to create a target group.
    """

    def __init__(self, msg: str, cause: str = None):
        super().__init__(msg)
        self.cause = cause


class ListenerNotInSnapshot(Exception):
    """
    We were asked about a listener whose rules we never loaded.
    """

    def __init__(self, listener_arn: str):
        super().__init__()
        self.listener_arn = listener_arn

    def __str__(self) -> str:
        return f'Listener "{self.listener_arn}" is not in the rules snapshot'


class RuleNotFound(ObjectDoesNotExist):
    """
    No rule on the listener forwards to the target group under the requested
    conditions.
    """

    def __init__(
        self,
        listener_arn: str,
        target_group_arn: str,
        fields: Optional[List[str]] = None,
        values: Optional[List[str]] = None
    ):
        super().__init__()
        self.listener_arn = listener_arn
        self.target_group_arn = target_group_arn
        self.fields = fields if fields else []
        self.values = values if values else []

    def __str__(self) -> str:
        return 'No rule found: listener {}, target group {}, fields: {}, values: {}'.format(
            self.listener_arn,
            self.target_group_arn,
            ','.join(self.fields),
            ','.join(self.values)
        )


class PaginationLimitExceeded(OperationFailed):
    """
    AWS kept handing us continuation markers past our page limit.
    """
    pass


class Cancelled(Exception):
    """
    Someone set our cancellation event while we were talking to AWS.
    """
    pass


class NoSuchConfigSection(Exception):
    """
    We looked in our albroute.yml for a section, but it was not present.
    """
    def __init__(self, section: str):
        super().__init__()
        self.section = section

    def __str__(self) -> str:
        return f"No such albroute.yml section: {self.section}"


class NoSuchConfigSectionItem(Exception):
    """
    We looked an existing albroute.yml section for a named item, but it was not present.
    """
    def __init__(self, section: str, name: str):
        super().__init__()
        self.section = section
        self.name = name

    def __str__(self) -> str:
        return f'No item named "{self.name}" albroute.yml section "{self.section}"'


class AlbRouteAppError(Exception):
    """Generic errors."""
    pass


class ConfigProcessingFailed(Exception):
    """
    While performing our variable substitutions in albroute.yml, we had a problem.
    """
    pass


class RenderException(Exception):
    """
    A table renderer could not find a column's value on an object.
    """
    pass
