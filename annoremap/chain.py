"""
module for reading UCSC alignment chains and projecting source assembly intervals through them

UCSC terminology: the chain 't' (reference) fields describe the source assembly and the 'q' (query) fields the target
assembly. Chain coordinates are 0-based half-open, features are 1-based inclusive; the conversion happens in
:meth:`ChainIndex.project`.
"""
from intervaltree import IntervalTree

from .constants import STRAND, reverse_strand
from .error import ChainFormatError
from .interval import Interval
from .util import LOG


class ChainBlock:
    """
    ungapped aligned block. source coordinates are on the forward strand, target coordinates on the chain's target
    strand (0-based, half-open)
    """
    __slots__ = ('t_start', 't_end', 'q_start', 'q_end')

    def __init__(self, t_start, t_end, q_start, q_end):
        self.t_start = t_start
        self.t_end = t_end
        self.q_start = q_start
        self.q_end = q_end

    def __repr__(self):
        return 'ChainBlock(t={}-{}, q={}-{})'.format(self.t_start, self.t_end, self.q_start, self.q_end)


class Chain:
    """
    one chain record, header fields plus the alignment data lines as (size, dt, dq) tuples
    """

    def __init__(
            self, score, t_name, t_size, t_strand, t_start, t_end,
            q_name, q_size, q_strand, q_start, q_end, chain_id, alignment):
        self.score = score
        self.t_name = t_name
        self.t_size = int(t_size)
        self.t_strand = t_strand
        self.t_start = int(t_start)
        self.t_end = int(t_end)
        self.q_name = q_name
        self.q_size = int(q_size)
        self.q_strand = q_strand
        self.q_start = int(q_start)
        self.q_end = int(q_end)
        self.chain_id = chain_id
        self.alignment = [tuple(row) for row in alignment]
        if self.t_strand != STRAND.POS:
            raise ChainFormatError('chain reference strand must be +', chain_id)
        if self.q_strand not in {STRAND.POS, STRAND.NEG}:
            raise ChainFormatError('invalid chain query strand', chain_id, q_strand)
        self._blocks = None

    @property
    def blocks(self):
        """list of :class:`ChainBlock`, computed on first use"""
        if self._blocks is None:
            self._blocks = []
            t_pos, q_pos = self.t_start, self.q_start
            for row in self.alignment:
                size = row[0]
                self._blocks.append(ChainBlock(t_pos, t_pos + size, q_pos, q_pos + size))
                if len(row) == 3:
                    t_pos += size + row[1]
                    q_pos += size + row[2]
            if self._blocks[-1].t_end != self.t_end:
                raise ChainFormatError('chain alignment does not end at the declared reference end', self.chain_id)
        return self._blocks

    def target_forward(self, q_start, q_end):
        """convert a target-strand range to forward strand coordinates"""
        if self.q_strand == STRAND.NEG:
            return self.q_size - q_end, self.q_size - q_start
        return q_start, q_end

    def header(self):
        return 'chain {} {} {} {} {} {} {} {} {} {} {} {}'.format(
            self.score, self.t_name, self.t_size, self.t_strand, self.t_start, self.t_end,
            self.q_name, self.q_size, self.q_strand, self.q_start, self.q_end, self.chain_id)

    def write(self, fh):
        fh.write(self.header() + '\n')
        for row in self.alignment:
            fh.write(' '.join([str(v) for v in row]) + '\n')
        fh.write('\n')

    def __repr__(self):
        return 'Chain({}, {}:{}-{} -> {}:{}-{}{})'.format(
            self.chain_id, self.t_name, self.t_start, self.t_end, self.q_name, self.q_start, self.q_end, self.q_strand)


def parse_chains(fh, filename='<chains>'):
    """
    generator of :class:`Chain` objects from an open chain file

    Raises:
        ChainFormatError: on a malformed header or alignment line
    """
    header = None
    alignment = []
    for lineno, line in enumerate(fh, start=1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        parts = line.split()
        if parts[0] == 'chain':
            if header is not None:
                raise ChainFormatError('{}:{}: chain started before the previous one ended'.format(filename, lineno))
            if len(parts) != 13:
                raise ChainFormatError('{}:{}: expected 13 fields in chain header, got {}'.format(
                    filename, lineno, len(parts)))
            header = parts
            alignment = []
            continue
        if header is None:
            raise ChainFormatError('{}:{}: alignment line outside of a chain'.format(filename, lineno))
        try:
            row = tuple([int(p) for p in parts])
        except ValueError:
            raise ChainFormatError('{}:{}: non-integer alignment line'.format(filename, lineno))
        if len(row) not in (1, 3) or row[0] <= 0 or min(row) < 0:
            raise ChainFormatError('{}:{}: invalid alignment line: {}'.format(filename, lineno, line))
        alignment.append(row)
        if len(row) == 1:
            yield Chain(
                header[1], header[2], header[3], header[4], header[5], header[6],
                header[7], header[8], header[9], header[10], header[11], header[12], alignment)
            header = None
    if header is not None:
        raise ChainFormatError('{}: truncated chain {}'.format(filename, header[12]))


def read_chains(filename):
    with open(filename) as fh:
        return list(parse_chains(fh, filename))


class MappedInterval:
    """
    the part of a source feature mapped through a single chain

    Attributes:
        seqid (str): target sequence
        start (int): target start (1-based, inclusive)
        end (int): target end (1-based, inclusive)
        strand (str): strand on the target
        block_count (int): number of alignment blocks stitched together
        src (Interval): the source range covered (1-based, inclusive)
    """

    def __init__(self, seqid, start, end, strand, block_count, src, chain_id=None):
        self.seqid = seqid
        self.start = start
        self.end = end
        self.strand = strand
        self.block_count = block_count
        self.src = src
        self.chain_id = chain_id

    @property
    def location(self):
        return Interval(self.start, self.end)

    def __repr__(self):
        return 'MappedInterval({}:{}-{}{}, blocks={})'.format(
            self.seqid, self.start, self.end, self.strand, self.block_count)


class Projection:
    """
    raw result of projecting one source interval
    """

    def __init__(self, src, mapped, unmapped, src_seq_in_mapping):
        self.src = src
        self.mapped = mapped
        self.unmapped = unmapped
        self.src_seq_in_mapping = src_seq_in_mapping

    def __repr__(self):
        return 'Projection({}, mapped={}, unmapped={})'.format(self.src, self.mapped, self.unmapped)


class ChainIndex:
    """
    chains indexed by source sequence for interval projection
    """

    def __init__(self, chains=None):
        self._trees = {}
        self.target_sizes = {}
        self.source_sizes = {}
        for chain in chains or []:
            self.add(chain)

    @classmethod
    def from_file(cls, filename, min_score=None, log=LOG):
        index = cls()
        skipped = 0
        with open(filename) as fh:
            for chain in parse_chains(fh, filename):
                if min_score is not None and float(chain.score) < min_score:
                    skipped += 1
                    continue
                index.add(chain)
        log('loaded {} chains from {} ({} below the minimum score)'.format(len(index), filename, skipped))
        return index

    def add(self, chain):
        self._trees.setdefault(chain.t_name, IntervalTree()).addi(chain.t_start, chain.t_end, chain)
        self.source_sizes[chain.t_name] = chain.t_size
        self.target_sizes[chain.q_name] = chain.q_size

    def __len__(self):
        return sum([len(tree) for tree in self._trees.values()])

    def has_source_sequence(self, seqid):
        return seqid in self._trees

    def target_size(self, seqid):
        return self.target_sizes.get(seqid)

    def _overlapping_chains(self, seqid, start0, end0):
        tree = self._trees.get(seqid)
        if tree is None:
            return []
        chains = [itvl.data for itvl in tree.overlap(start0, end0)]
        return sorted(chains, key=lambda c: (-float(c.score), str(c.chain_id)))

    def project(self, seqid, start, end, strand=STRAND.NS):
        """
        project a 1-based inclusive source range

        Every chain the range falls on gives one :class:`MappedInterval`, spanning the first to the last aligned base
        of the range in that chain. Source bases not covered by any mapped interval are returned as the unmapped
        remainder

        Returns:
            Projection: mapped intervals in source order and the unmapped remainder
        """
        src = Interval(start, end)
        start0, end0 = start - 1, end
        mapped = []
        for chain in self._overlapping_chains(seqid, start0, end0):
            hits = []
            for block in chain.blocks:
                if block.t_end <= start0:
                    continue
                if block.t_start >= end0:
                    break
                low = max(block.t_start, start0)
                high = min(block.t_end, end0)
                q_low = block.q_start + (low - block.t_start)
                hits.append((low, high, q_low, q_low + (high - low)))
            if not hits:
                continue
            q_forward = [chain.target_forward(h[2], h[3]) for h in hits]
            target_strand = strand if chain.q_strand == STRAND.POS else reverse_strand(strand)
            mapped.append(MappedInterval(
                chain.q_name,
                min([q[0] for q in q_forward]) + 1,
                max([q[1] for q in q_forward]),
                target_strand,
                len(hits),
                Interval(hits[0][0] + 1, hits[-1][1]),
                chain_id=chain.chain_id,
            ))
        mapped.sort(key=lambda m: (m.src.start, m.src.end))
        unmapped = Interval.subtract_all(src, *[m.src for m in mapped])
        return Projection(src, mapped, unmapped, self.has_source_sequence(seqid))
