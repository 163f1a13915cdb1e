import logging
import os
import shutil
import tempfile
import unittest
from unittest import mock

from annoremap.constants import AnnoremapNamespace
from annoremap.util import DEVNULL, LOG, bash_expands, filepath, log_arguments


class TestBashExpands(unittest.TestCase):

    def setUp(self):
        self.dirname = tempfile.mkdtemp()
        for name in ['source.gff3', 'target.gff3']:
            with open(os.path.join(self.dirname, name), 'w') as fh:
                fh.write('##gff-version 3\n')

    def tearDown(self):
        shutil.rmtree(self.dirname)

    def test_brace_expansion(self):
        result = bash_expands(os.path.join(self.dirname, '{source,target}.gff3'))
        self.assertEqual(2, len(result))

    def test_no_match(self):
        with self.assertRaises(FileNotFoundError):
            bash_expands(os.path.join(self.dirname, 'other.gtf'))

    def test_filepath(self):
        self.assertEqual(
            os.path.join(self.dirname, 'source.gff3'), filepath(os.path.join(self.dirname, 'source.gff3')))
        with self.assertRaises(TypeError):
            filepath(os.path.join(self.dirname, '*.gff3'))
        with self.assertRaises(TypeError):
            filepath(os.path.join(self.dirname, 'missing.gff3'))


class TestLog(unittest.TestCase):

    def test_devnull(self):
        with mock.patch('logging.log') as log_mock:
            DEVNULL('nothing')
            log_mock.assert_not_called()

    def test_indent(self):
        with mock.patch('logging.log') as log_mock:
            with LOG.indent() as log:
                log('a', 'b')
            level, message = log_mock.call_args[0]
        self.assertEqual(logging.INFO, level)
        self.assertTrue(message.endswith('  a b'))

    def test_log_arguments(self):
        with mock.patch('logging.log') as log_mock:
            log_arguments(AnnoremapNamespace(chains='a.chain', min_chain_score=None, names=['x', 'y']))
        messages = [call[0][1].strip() for call in log_mock.call_args_list]
        self.assertIn("chains = 'a.chain'", messages)
        self.assertIn('min_chain_score = None', messages)
        self.assertIn("'y'", messages)
