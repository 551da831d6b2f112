import os
import unittest

from mock import Mock
from testfixtures import Replacer

from albroute.core import aws


class TestSessionFor(unittest.TestCase):

    def setUp(self):
        self.session_class = Mock()
        self.session_class.return_value.available_profiles = ['prod']
        self.replacer = Replacer()
        self.replacer.replace('boto3.session.Session', self.session_class)

    def tearDown(self):
        self.replacer.restore()

    def test_empty_section(self):
        aws.session_for({})
        self.session_class.assert_called_with()

    def test_access_keys_beat_profile(self):
        aws.session_for({'access_key': 'AKIA', 'secret_key': 'shh', 'profile': 'prod', 'region': 'us-west-2'})
        self.session_class.assert_called_with(
            aws_access_key_id='AKIA',
            aws_secret_access_key='shh',
            region_name='us-west-2'
        )

    def test_profile(self):
        aws.session_for({'profile': 'prod'})
        self.session_class.assert_called_with(profile_name='prod')

    def test_unknown_profile(self):
        with self.assertRaises(aws.NoSuchAWSProfile):
            aws.session_for({'profile': 'nope'})


class TestCheckAccount(unittest.TestCase):

    def setUp(self):
        self.session = Mock()
        self.session.client.return_value.get_caller_identity.return_value = {'Account': '123456789012'}

    def test_no_lists_skips_sts(self):
        aws.check_account(self.session, {'region': 'us-west-2'})
        self.session.client.assert_not_called()

    def test_allowed(self):
        aws.check_account(self.session, {'allowed_account_ids': [123456789012]})

    def test_not_allowed(self):
        with self.assertRaises(aws.ForbiddenAWSAccountId):
            aws.check_account(self.session, {'allowed_account_ids': ['999999999999']})

    def test_forbidden(self):
        with self.assertRaises(aws.ForbiddenAWSAccountId):
            aws.check_account(self.session, {'forbidden_account_ids': ['123456789012']})


class TestBuildBoto3Session(unittest.TestCase):

    def setUp(self):
        self.replacer = Replacer()
        self.replacer.replace('albroute.core.aws.boto3_session', None)

    def tearDown(self):
        self.replacer.restore()

    def test_override(self):
        session = Mock()
        aws.build_boto3_session('albroute.yml', boto3_session_override=session)
        self.assertIs(aws.get_boto3_session(), session)

    def test_missing_file_gives_empty_section(self):
        filename = os.path.join(os.path.dirname(__file__), 'no-such-albroute.yml')
        self.assertEqual(aws.read_aws_section(filename), {})

    def test_get_falls_back_to_boto3_module(self):
        import boto3
        self.assertIs(aws.get_boto3_session(), boto3)
