import io
import unittest

from annoremap.chain import Chain, ChainIndex, parse_chains, read_chains
from annoremap.constants import STRAND
from annoremap.error import ChainFormatError
from annoremap.interval import Interval
from annoremap.util import DEVNULL

from ..util import get_data


class TestParseChains(unittest.TestCase):

    def test_read_file(self):
        chains = read_chains(get_data('source_to_target.chain'))
        self.assertEqual(2, len(chains))
        first, second = chains
        self.assertEqual('chr1', first.t_name)
        self.assertEqual(10100, first.q_size)
        self.assertEqual([(3000, 0, 50), (3000,)], first.alignment)
        self.assertEqual(STRAND.NEG, second.q_strand)
        self.assertEqual('2', second.chain_id)

    def test_blocks(self):
        chain, = parse_chains(io.StringIO('chain 10 chr1 100 + 0 30 chr2 100 + 5 40 7\n10 5 10\n15\n'))
        self.assertEqual(
            [(0, 10, 5, 15), (15, 30, 25, 40)],
            [(b.t_start, b.t_end, b.q_start, b.q_end) for b in chain.blocks])

    def test_blocks_do_not_reach_end(self):
        chain, = parse_chains(io.StringIO('chain 10 chr1 100 + 0 40 chr2 100 + 5 40 7\n10 5 10\n15\n'))
        with self.assertRaises(ChainFormatError):
            chain.blocks

    def test_header_field_count(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('chain 10 chr1 100 + 0 30 chr2 100 + 5 40\n30\n')))

    def test_non_integer_row(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('chain 10 chr1 100 + 0 30 chr2 100 + 5 35 7\n3x\n')))

    def test_two_value_row(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('chain 10 chr1 100 + 0 30 chr2 100 + 5 35 7\n10 5\n20\n')))

    def test_truncated(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('chain 10 chr1 100 + 0 30 chr2 100 + 5 35 7\n10 0 0\n')))

    def test_row_outside_chain(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('30\n')))

    def test_negative_reference_strand(self):
        with self.assertRaises(ChainFormatError):
            list(parse_chains(io.StringIO('chain 10 chr1 100 - 0 30 chr2 100 + 5 35 7\n30\n')))

    def test_write(self):
        text = 'chain 10 chr1 100 + 0 30 chr2 100 - 5 40 7\n10 5 10\n15\n\n'
        chain, = parse_chains(io.StringIO(text))
        fh = io.StringIO()
        chain.write(fh)
        self.assertEqual(text, fh.getvalue())


class TestChainIndex(unittest.TestCase):

    def setUp(self):
        self.index = ChainIndex.from_file(get_data('source_to_target.chain'), log=DEVNULL)

    def test_sizes(self):
        self.assertEqual(2, len(self.index))
        self.assertEqual({'chr1': 10100, 'chr5': 2000}, self.index.target_sizes)
        self.assertEqual({'chr1': 10000}, self.index.source_sizes)
        self.assertEqual(2000, self.index.target_size('chr5'))
        self.assertIsNone(self.index.target_size('chr2'))

    def test_single_block(self):
        projection = self.index.project('chr1', 101, 200, STRAND.POS)
        mapped, = projection.mapped
        self.assertEqual(('chr1', 201, 300, STRAND.POS, 1), (
            mapped.seqid, mapped.start, mapped.end, mapped.strand, mapped.block_count))
        self.assertEqual([], projection.unmapped)
        self.assertTrue(projection.src_seq_in_mapping)

    def test_across_gap(self):
        projection = self.index.project('chr1', 2901, 3200, STRAND.POS)
        mapped, = projection.mapped
        self.assertEqual((3001, 3350, 2), (mapped.start, mapped.end, mapped.block_count))
        self.assertEqual(Interval(2901, 3200), mapped.src)

    def test_partially_aligned(self):
        projection = self.index.project('chr1', 5801, 6030, STRAND.POS)
        mapped, = projection.mapped
        self.assertEqual((5951, 6150), (mapped.start, mapped.end))
        self.assertEqual([Interval(6001, 6030)], projection.unmapped)

    def test_negative_strand_chain(self):
        projection = self.index.project('chr1', 8201, 8250, STRAND.POS)
        mapped, = projection.mapped
        self.assertEqual(('chr5', 1751, 1800, STRAND.NEG), (mapped.seqid, mapped.start, mapped.end, mapped.strand))

    def test_not_aligned(self):
        projection = self.index.project('chr1', 7001, 7500, STRAND.POS)
        self.assertEqual([], projection.mapped)
        self.assertEqual([Interval(7001, 7500)], projection.unmapped)
        self.assertTrue(projection.src_seq_in_mapping)

    def test_sequence_not_in_chains(self):
        projection = self.index.project('chr2', 101, 400, STRAND.NEG)
        self.assertEqual([], projection.mapped)
        self.assertFalse(projection.src_seq_in_mapping)

    def test_min_score(self):
        index = ChainIndex.from_file(get_data('source_to_target.chain'), min_score=600, log=DEVNULL)
        self.assertEqual(1, len(index))
        self.assertEqual([], index.project('chr1', 8201, 8250).mapped)

    def test_overlapping_chains_by_score(self):
        index = ChainIndex([
            Chain(10, 'chr1', 100, '+', 0, 50, 'chrA', 100, '+', 0, 50, 'low', [(50,)]),
            Chain(90, 'chr1', 100, '+', 0, 50, 'chrB', 100, '+', 0, 50, 'high', [(50,)]),
        ])
        self.assertEqual(['high', 'low'], [c.chain_id for c in index._overlapping_chains('chr1', 0, 10)])
        projection = index.project('chr1', 1, 10)
        self.assertEqual(2, len(projection.mapped))
        self.assertEqual([], projection.unmapped)
