import argparse
import os
import unittest
from unittest import mock

from annoremap.constants import (
    REMAP_STATUS,
    STRAND,
    AnnoremapNamespace,
    cast_boolean,
    float_fraction,
    most_severe_remap_status,
    remap_status_severity,
    reverse_strand,
)
from annoremap.util import WeakAnnoremapNamespace


class TestAnnoremapNamespace(unittest.TestCase):

    def test_enforce(self):
        self.assertEqual('partial', REMAP_STATUS.enforce('partial'))
        with self.assertRaises(KeyError):
            REMAP_STATUS.enforce('PARTIAL')

    def test_respecify_error(self):
        with self.assertRaises(AttributeError):
            AnnoremapNamespace('a', a=1)

    def test_define_and_type(self):
        nspace = AnnoremapNamespace()
        nspace.add('slop', 10, defn='distance allowed')
        self.assertEqual('distance allowed', nspace.define('slop'))
        self.assertEqual(int, nspace.type('slop'))
        self.assertEqual('default', nspace.define('other', 'default'))
        with self.assertRaises(KeyError):
            nspace.define('other')

    def test_discard(self):
        nspace = AnnoremapNamespace(a=1, b=2)
        nspace.discard('a')
        self.assertEqual(['b'], nspace.keys())

    def test_env_override(self):
        nspace = WeakAnnoremapNamespace()
        nspace.add('max_gene_size_change', 0.5, cast_type=float)
        with mock.patch.dict(os.environ, {'ANNOREMAP_MAX_GENE_SIZE_CHANGE': '0.25'}):
            self.assertEqual(0.25, nspace.max_gene_size_change)
        self.assertEqual(0.5, nspace.max_gene_size_change)

    def test_env_override_nullable(self):
        nspace = WeakAnnoremapNamespace()
        nspace.add('min_chain_score', None, cast_type=float, nullable=True)
        with mock.patch.dict(os.environ, {'ANNOREMAP_MIN_CHAIN_SCORE': 'None'}):
            self.assertIsNone(nspace.min_chain_score)
        with mock.patch.dict(os.environ, {'ANNOREMAP_MIN_CHAIN_SCORE': '100'}):
            self.assertEqual(100.0, nspace.min_chain_score)

    def test_not_env_overwritable(self):
        nspace = AnnoremapNamespace()
        nspace.add('value', 1)
        with mock.patch.dict(os.environ, {'ANNOREMAP_VALUE': '2'}):
            self.assertEqual(1, nspace.value)


class TestRemapStatusOrder(unittest.TestCase):

    def test_severity_follows_declaration_order(self):
        values = REMAP_STATUS.values()
        for less, more in zip(values, values[1:]):
            self.assertLess(remap_status_severity(less), remap_status_severity(more))

    def test_most_severe(self):
        self.assertEqual(
            REMAP_STATUS.PARTIAL, most_severe_remap_status(REMAP_STATUS.FULL_CONTIG, REMAP_STATUS.PARTIAL))
        self.assertEqual(
            REMAP_STATUS.GENE_SIZE_CHANGE,
            most_severe_remap_status(REMAP_STATUS.GENE_SIZE_CHANGE, REMAP_STATUS.GENE_CONFLICT))
        self.assertEqual(REMAP_STATUS.NONE, most_severe_remap_status())

    def test_invalid_status(self):
        with self.assertRaises(KeyError):
            remap_status_severity('bad')


class TestCasts(unittest.TestCase):

    def test_cast_boolean(self):
        self.assertTrue(cast_boolean('Yes'))
        self.assertFalse(cast_boolean('0'))
        with self.assertRaises(TypeError):
            cast_boolean('maybe')

    def test_float_fraction(self):
        self.assertEqual(0.5, float_fraction('0.5'))
        with self.assertRaises(argparse.ArgumentTypeError):
            float_fraction('1.5')

    def test_reverse_strand(self):
        self.assertEqual(STRAND.NEG, reverse_strand(STRAND.POS))
        self.assertEqual(STRAND.POS, reverse_strand(STRAND.NEG))
        self.assertEqual(STRAND.NS, reverse_strand(STRAND.NS))
