#!/usr/bin/env python3
"""
Tests for settings loading and the gamezone command line.

Run with:
    python -m pytest tests/test_cli.py
"""
import io
import json
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import gamezone_cli
from gamezone.exceptions import ConfigError
from gamezone.settings import DEFAULT_LATENCY, load_settings


class TmpDirMixin(unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)
        super().tearDown()


# ===========================================================================
# Settings
# ===========================================================================

class TestLoadSettings(TmpDirMixin):

    def _write(self, payload):
        path = os.path.join(self.tmp, 'settings.json')
        with open(path, 'w') as fh:
            fh.write(payload)
        return path

    def test_defaults_without_file(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(os.path.join(self.tmp, 'missing.json'))
        self.assertEqual(settings['data_dir'], '.gamezone')
        self.assertEqual(settings['latency'], DEFAULT_LATENCY)
        self.assertEqual(settings['catalog']['api_key'], '')

    def test_file_is_merged(self):
        path = self._write(json.dumps({'catalog': {'api_key': 'abc'},
                                       'latency': {'auth': 0.0}}))
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings(path)
        self.assertEqual(settings['catalog']['api_key'], 'abc')
        self.assertEqual(settings['catalog']['timeout'], 10)
        self.assertEqual(settings['latency']['auth'], 0.0)
        self.assertEqual(settings['latency']['reviews'], DEFAULT_LATENCY['reviews'])

    def test_defaults_are_not_mutated(self):
        path = self._write(json.dumps({'latency': {'auth': 9}}))
        with patch.dict(os.environ, {}, clear=True):
            load_settings(path)
            self.assertEqual(load_settings()['latency']['auth'], DEFAULT_LATENCY['auth'])

    def test_environment_wins(self):
        path = self._write(json.dumps({'data_dir': '/from/file'}))
        env = {'GAMEZONE_DATA_DIR': '/from/env', 'RAWG_API_KEY': 'envkey',
               'GAMEZONE_LOG_LEVEL': 'DEBUG', 'GAMEZONE_LATENCY_SCALE': '2'}
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings(path)
        self.assertEqual(settings['data_dir'], '/from/env')
        self.assertEqual(settings['catalog']['api_key'], 'envkey')
        self.assertEqual(settings['log_level'], 'DEBUG')
        self.assertEqual(settings['latency']['auth'], DEFAULT_LATENCY['auth'] * 2)

    def test_zero_scale_disables_latency(self):
        with patch.dict(os.environ, {'GAMEZONE_LATENCY_SCALE': '0'}, clear=True):
            settings = load_settings()
        self.assertTrue(all(v == 0 for v in settings['latency'].values()))

    def test_invalid_json(self):
        path = self._write('{not json')
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                load_settings(path)

    def test_non_object(self):
        path = self._write('[1, 2]')
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ConfigError):
                load_settings(path)

    def test_bad_latency_scale(self):
        with patch.dict(os.environ, {'GAMEZONE_LATENCY_SCALE': 'fast'}, clear=True):
            with self.assertRaises(ConfigError):
                load_settings()


# ===========================================================================
# Command line
# ===========================================================================

class TestCli(TmpDirMixin):

    def setUp(self):
        super().setUp()
        self.env = patch.dict(os.environ, {'GAMEZONE_LATENCY_SCALE': '0'}, clear=True)
        self.env.start()

    def tearDown(self):
        self.env.stop()
        super().tearDown()

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = gamezone_cli.main(['--data-dir', self.tmp] + list(argv))
        return code, out.getvalue()

    def test_signup_whoami_and_favorites(self):
        code, out = self._run('signup', 'Nova', 'nova@x.com', 'secret1')
        self.assertEqual(code, 0)
        self.assertIn('Welcome, Nova', out)

        code, out = self._run('fav', 'add', '3498')
        self.assertEqual(code, 0)
        self.assertIn('3498', out)

        code, out = self._run('whoami')
        self.assertEqual(code, 0)
        self.assertIn('nova@x.com', out)
        self.assertIn('3498', out)

    def test_post_and_list_review(self):
        self._run('signup', 'Nova', 'nova@x.com', 'secret1')
        code, out = self._run('review', 'post', '42', '4', '--comment', 'Good',
                              '--name', 'Some Game')
        self.assertEqual(code, 0)
        self.assertIn('Some Game', out)

        code, out = self._run('review', 'list', '42')
        self.assertEqual(code, 0)
        self.assertIn('Nova', out)
        self.assertIn('Good', out)

    def test_edit_without_comment_keeps_existing_comment(self):
        self._run('signup', 'Nova', 'nova@x.com', 'secret1')
        self._run('review', 'post', '42', '4', '--comment', 'Good', '--name', 'Some Game')
        with open(os.path.join(self.tmp, 'reviews.json')) as f:
            review = json.load(f)[0]
        code, _ = self._run('review', 'edit', review['id'], '2')
        self.assertEqual(code, 0)
        with open(os.path.join(self.tmp, 'reviews.json')) as f:
            edited = json.load(f)[0]
        self.assertEqual((edited['rating'], edited['comment']), (2, 'Good'))

        self._run('review', 'edit', review['id'], '3', '--comment', 'Meh')
        with open(os.path.join(self.tmp, 'reviews.json')) as f:
            self.assertEqual(json.load(f)[0]['comment'], 'Meh')

    def test_demo_login_and_logout(self):
        code, out = self._run('login', 'gamer@god.com', 'password123')
        self.assertEqual(code, 0)
        self.assertIn('GamerGod', out)
        self.assertEqual(self._run('logout')[0], 0)
        code, out = self._run('whoami')
        self.assertEqual(code, 1)
        self.assertIn('Not signed in', out)

    def test_bad_credentials_exit_code(self):
        code, out = self._run('login', 'gamer@god.com', 'wrong')
        self.assertEqual(code, 1)
        self.assertIn('Invalid email or password.', out)

    def test_cannot_edit_someone_elses_review(self):
        self._run('signup', 'Nova', 'nova@x.com', 'secret1')
        code, out = self._run('review', 'edit', 'rev1', '1')
        self.assertEqual(code, 1)
        self.assertIn('You can only change your own reviews.', out)

    def test_favorites_require_sign_in(self):
        code, out = self._run('fav', 'list')
        self.assertEqual(code, 1)
        self.assertIn('Not signed in', out)

    def test_bad_config_file(self):
        path = os.path.join(self.tmp, 'bad.json')
        with open(path, 'w') as fh:
            fh.write('{')
        out = io.StringIO()
        with redirect_stdout(out):
            code = gamezone_cli.main(['--config', path, 'whoami'])
        self.assertEqual(code, 1)
        self.assertIn('Could not load settings file', out.getvalue())


if __name__ == '__main__':
    unittest.main()
