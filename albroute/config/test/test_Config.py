import os
import unittest

from testfixtures import Replacer

from albroute.config.config import Config
from albroute.exceptions import ConfigProcessingFailed, NoSuchConfigSection, NoSuchConfigSectionItem


CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
CONFIG_YML = os.path.join(CURRENT_DIR, 'interpolate.yml')
ENV_FILE = os.path.join(CURRENT_DIR, 'env_file.env')


class TestConfig_load_yaml(unittest.TestCase):

    def setUp(self):
        self.config = Config.new(
            filename=CONFIG_YML,
            env_file=ENV_FILE,
            import_env=False,
            ignore_missing_environment=True
        )

    def test_get_service(self):
        service = self.config.get_service('foobar-prod')
        self.assertEqual(service['load_balancer'], 'foobar-alb')
        self.assertEqual(service['service_port'], 8080)

    def test_get_service_by_environment(self):
        self.assertEqual(self.config.get_section_item('services', 'test')['name'], 'foobar-test')

    def test_per_item_env_file_nested_dict_interpolation(self):
        self.assertEqual(self.config.get_service('foobar-prod')['health_check']['path'], '/healthz')

    def test_replacements_in_variable_name(self):
        self.assertEqual(self.config.get_service('foobar-prod')['rules'][0]['values'][0], '/foobar/*')

    def test_multiple_variables_in_one_value(self):
        # API_HOST comes from foobar-prod.env, which beats the global env_file
        self.assertEqual(self.config.get_service('foobar-prod')['rules'][1]['values'][1], 'prod-api-v2')

    def test_global_section_interpolation(self):
        self.assertEqual(self.config.get_global_config('load_balancer'), 'foobar-alb')
        self.assertEqual(self.config.get_global_config('domain'), 'example.org')

    def test_global_config_default(self):
        self.assertEqual(self.config.get_global_config('max_pages', 100), 100)

    def test_missing_variable_is_marked(self):
        self.assertEqual(
            self.config.get_service('foobar-test')['rules'][0]['values'][0],
            'NOT-IN-ENVIRONMENT'
        )

    def test_raw_is_not_interpolated(self):
        self.assertEqual(self.config.raw['albroute']['domain'], '${env.ROUTING_DOMAIN}')

    def test_no_such_service(self):
        with self.assertRaises(NoSuchConfigSectionItem):
            self.config.get_service('barfoo')

    def test_no_such_section(self):
        with self.assertRaises(NoSuchConfigSection):
            self.config.get_section('tunnels')


class TestConfig_load_yaml_no_interpolate(unittest.TestCase):

    def setUp(self):
        self.config = Config.new(filename=CONFIG_YML, env_file=ENV_FILE, interpolate=False)

    def test_simple_interpolation(self):
        self.assertEqual(self.config.get_global_config('load_balancer'), '${env.LOAD_BALANCER_NAME}')

    def test_nested_list_interpolation(self):
        self.assertEqual(
            self.config.get_service('foobar-prod')['rules'][0]['values'][0],
            '${env.{name}-PATH}'
        )


class TestConfig_missing_environment(unittest.TestCase):

    def test_missing_variable_fails(self):
        with self.assertRaises(ConfigProcessingFailed):
            Config.new(filename=CONFIG_YML, env_file=ENV_FILE, import_env=False)

    def test_missing_env_file_fails(self):
        with self.assertRaises(ConfigProcessingFailed):
            Config.new(
                filename=CONFIG_YML,
                env_file=os.path.join(CURRENT_DIR, 'nope.env'),
                import_env=False
            )

    def test_missing_config_file_fails(self):
        with self.assertRaises(ConfigProcessingFailed):
            Config.new(filename=os.path.join(CURRENT_DIR, 'nope.yml'))


class TestConfig_import_env(unittest.TestCase):

    def test_os_environ_is_used(self):
        environ = {'MISSING_HOST': 'www', 'PROD_SUFFIX': 'v3'}
        with Replacer() as r:
            r.replace('os.environ', environ)
            config = Config.new(filename=CONFIG_YML, env_file=ENV_FILE)
        self.assertEqual(config.get_service('foobar-test')['rules'][0]['values'][0], 'www')
        self.assertEqual(config.get_service('foobar-prod')['rules'][1]['values'][1], 'prod-api-v3')
