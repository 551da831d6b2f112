from typing import Sequence, TYPE_CHECKING

from cement.utils.misc import minimal_logger

from albroute.exceptions import CertificateLookupFailed, LookupFailed, ObjectDoesNotExist

if TYPE_CHECKING:
    from albroute.core.models import LoadBalancerListener
    from albroute.types import CertificateDirectory, SupportsLog


def root_domain(domain_name: str) -> str:
    """
    Reduce a certificate domain name to its last two labels::

        >>> root_domain('api.shop.example.com')
        'example.com'

    Names with fewer than two labels give us ``''``.
    """
    labels = domain_name.split('.')
    if len(labels) >= 2:
        return '.'.join(labels[-2:])
    return ''


def resolve_domain(
    listeners: Sequence["LoadBalancerListener"],
    certificates: "CertificateDirectory",
    log: "SupportsLog" = None
) -> str:
    """
    Work out which domain our load balancer serves by looking at the first TLS
    certificate attached to any of ``listeners``.

    We assume one canonical domain per load balancer, so we stop at the first
    certificate we find, even if other listeners carry different ones.

    Args:
        listeners: the load balancer's listeners, in order
        certificates: where we describe certificates

    Keyword Args:
        log: where to send debug messages

    Raises:
        CertificateLookupFailed: we could not describe the certificate

    Returns:
        The root domain of the certificate, or ``''`` if no listener has a
        certificate.
    """
    if log is None:
        log = minimal_logger(__name__)
    for listener in listeners:
        for certificate_arn in listener.ssl_certificates:
            log.debug(f'Load balancer certificate found with arn: {certificate_arn}')
            try:
                certificate = certificates.get(certificate_arn)
            except (ObjectDoesNotExist, LookupFailed) as e:
                raise CertificateLookupFailed(f'Could not describe certificate {certificate_arn}: {e}')
            log.debug(f'Domain found through load balancer certificate: {certificate.domain_name}')
            return root_domain(certificate.domain_name)
    return ''
