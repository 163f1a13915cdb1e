import sys
import unittest
from unittest.mock import patch

from annoremap.constants import SUBCOMMAND
from annoremap.main import main


class TestHelpMenu(unittest.TestCase):

    def test_main(self):
        with patch.object(sys, 'argv', ['annoremap', '-h']):
            try:
                returncode = main()
            except SystemExit as err:
                self.assertEqual(0, err.code)
            else:
                self.assertEqual(0, returncode)

    def test_remap(self):
        with patch.object(sys, 'argv', ['annoremap', SUBCOMMAND.REMAP, '-h']):
            try:
                returncode = main()
            except SystemExit as err:
                self.assertEqual(0, err.code)
            else:
                self.assertEqual(0, returncode)

    def test_edit_chain(self):
        with patch.object(sys, 'argv', ['annoremap', SUBCOMMAND.EDIT_CHAIN, '-h']):
            try:
                returncode = main()
            except SystemExit as err:
                self.assertEqual(0, err.code)
            else:
                self.assertEqual(0, returncode)

    def test_bad_option(self):
        with patch.object(sys, 'argv', ['annoremap', SUBCOMMAND.REMAP, '--blargh']):
            with self.assertRaises(SystemExit) as err:
                main()
            self.assertNotEqual(0, err.exception.code)
