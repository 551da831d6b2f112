import os
from typing import Dict, Any, Optional, cast

import boto3
import yaml

from albroute.exceptions import AlbRouteAppError, ConfigProcessingFailed


#: The session every manager uses.  Set by :py:func:`build_boto3_session`.
boto3_session: Optional[boto3.session.Session] = None


class NoSuchAWSProfile(AlbRouteAppError):
    """
    The ``aws.profile`` in albroute.yml is not in ``~/.aws/config``.
    """


class ForbiddenAWSAccountId(AlbRouteAppError):
    """
    Our credentials belong to an AWS account that the ``aws:`` section of
    albroute.yml does not let us touch.
    """


def read_aws_section(filename: str) -> Dict[str, Any]:
    """
    Return the raw ``aws:`` section of ``filename``, or ``{}`` if the file or
    the section is missing.  No ``${env.VAR}`` interpolation is done here: we
    need the session before the rest of the config is processed.
    """
    if not os.path.exists(filename):
        return {}
    if not os.access(filename, os.R_OK):
        raise ConfigProcessingFailed(f"albroute config file '{filename}' exists but is not readable")
    with open(filename, encoding='utf-8') as f:
        raw = yaml.load(f, Loader=yaml.FullLoader) or {}
    return raw.get('aws', {}) or {}


def session_for(aws: Dict[str, Any]) -> boto3.session.Session:
    """
    Build a boto3 session from an ``aws:`` section.  ``access_key`` and
    ``secret_key`` beat ``profile``; ``region`` applies to either.

    Raises:
        NoSuchAWSProfile: ``profile`` is not one boto3 knows about
    """
    kwargs: Dict[str, Any] = {}
    if aws.get('region'):
        kwargs['region_name'] = aws['region']
    if 'access_key' in aws:
        kwargs['aws_access_key_id'] = aws['access_key']
        kwargs['aws_secret_access_key'] = aws.get('secret_key')
    elif 'profile' in aws:
        profile = aws['profile']
        if profile not in boto3.session.Session().available_profiles:
            raise NoSuchAWSProfile(f"AWS profile '{profile}' does not exist in your ~/.aws/config")
        kwargs['profile_name'] = profile
    return boto3.session.Session(**kwargs)


def check_account(session: boto3.session.Session, aws: Dict[str, Any]) -> None:
    """
    Make sure ``session`` is allowed to act on its account under the
    ``allowed_account_ids`` and ``forbidden_account_ids`` lists in ``aws``.
    We only call STS if one of those lists is present.

    Raises:
        ForbiddenAWSAccountId: the account is not allowed
    """
    allowed = aws.get('allowed_account_ids')
    forbidden = aws.get('forbidden_account_ids')
    if allowed is None and forbidden is None:
        return
    account_id = session.client('sts').get_caller_identity().get('Account')
    if allowed is not None and account_id not in [str(a) for a in allowed]:
        raise ForbiddenAWSAccountId(f"Account ID {account_id} is not in the list of allowed_account_ids")
    if forbidden is not None and account_id in [str(a) for a in forbidden]:
        raise ForbiddenAWSAccountId(f"Account ID {account_id} is in the list of forbidden_account_ids")


def build_boto3_session(
    filename: str,
    boto3_session_override: boto3.session.Session = None,
    use_aws_section: bool = True
) -> boto3.session.Session:
    """
    Build the boto3 session all our managers share and save it in
    :py:data:`boto3_session`.

    Args:
        filename: the path to our albroute.yml file

    Keyword Args:
        boto3_session_override: use this session instead of building one
        use_aws_section: if ``False``, ignore the ``aws:`` section in
            albroute.yml and let boto3 find credentials on its own

    Raises:
        NoSuchAWSProfile: the configured profile does not exist
        ForbiddenAWSAccountId: the account is not allowed

    Returns:
        The session we saved.
    """
    global boto3_session  # pylint: disable=global-statement
    if boto3_session_override:
        boto3_session = boto3_session_override
        return boto3_session
    aws = read_aws_section(filename or 'albroute.yml') if use_aws_section else {}
    session = session_for(aws)
    check_account(session, aws)
    boto3_session = session
    return boto3_session


def get_boto3_session(
    boto3_session_override: boto3.session.Session = None
) -> boto3.session.Session:
    """
    Return ``boto3_session_override`` if given, else the session from
    :py:func:`build_boto3_session`.  If nobody built one, fall back to the
    ``boto3`` module itself, which has the same ``client()`` signature and uses
    the default credential chain.
    """
    if boto3_session_override:
        return boto3_session_override
    if boto3_session:
        return boto3_session
    return cast(boto3.session.Session, boto3)
