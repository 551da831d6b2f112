import unittest

from botocore.exceptions import ClientError, NoCredentialsError
from mock import Mock
from testfixtures import Replacer

from albroute.core.models import Certificate

CERT_ARN = 'arn:aws:acm:us-west-2:123456789012:certificate/1234'


def client_error(code):
    return ClientError({'Error': {'Code': code, 'Message': code}}, 'DescribeCertificate')


class TestCertificateManager(unittest.TestCase):

    def setUp(self):
        self.client = Mock()
        session = Mock()
        session.client.return_value = self.client
        self.replacer = Replacer()
        self.replacer.replace('albroute.core.models.abstract.get_boto3_session', Mock(return_value=session))

    def tearDown(self):
        self.replacer.restore()

    def test_get(self):
        self.client.describe_certificate.return_value = {
            'Certificate': {
                'CertificateArn': CERT_ARN,
                'DomainName': '*.example.com',
                'SubjectAlternativeNames': ['*.example.com', 'example.com'],
            }
        }
        cert = Certificate.objects.get(CERT_ARN)
        self.assertEqual(cert.domain_name, '*.example.com')
        self.client.describe_certificate.assert_called_once_with(CertificateArn=CERT_ARN)

    def test_not_found(self):
        self.client.describe_certificate.side_effect = client_error('ResourceNotFoundException')
        with self.assertRaises(Certificate.DoesNotExist):
            Certificate.objects.get(CERT_ARN)

    def test_invalid_arn(self):
        self.client.describe_certificate.side_effect = client_error('InvalidArnException')
        with self.assertRaises(Certificate.InvalidReference):
            Certificate.objects.get('not-an-arn')

    def test_other_error(self):
        self.client.describe_certificate.side_effect = client_error('AccessDeniedException')
        with self.assertRaises(Certificate.LookupFailed):
            Certificate.objects.get(CERT_ARN)

    def test_no_credentials(self):
        self.client.describe_certificate.side_effect = NoCredentialsError()
        with self.assertRaises(Certificate.LookupFailed):
            Certificate.objects.get(CERT_ARN)
