"""
module which holds the functions for loading the sequence size and sequence name reference files
"""
import gzip

from Bio import SeqIO
import pandas as pd

from .error import SequenceNameError
from .util import DEVNULL

FASTA_SUFFIXES = ('.fa', '.fasta', '.fna', '.fa.gz', '.fasta.gz', '.fna.gz')


def load_sequence_sizes(*filepaths, log=DEVNULL):
    """
    load the lengths of the sequences of an assembly. Reads either a fasta file or a two column tab-delimited table
    without a header, for example a samtools fasta index or a UCSC chrom.sizes file

    .. code-block:: text

        chr1    248956422
        chr2    242193529

    Returns:
        :class:`dict` of :class:`int` by :class:`str`: sequence lengths by sequence name

    Raises:
        KeyError: a sequence was defined twice
    """
    sizes = {}
    for filename in filepaths:
        if filename.endswith(FASTA_SUFFIXES):
            current = _load_fasta_sizes(filename)
        else:
            df = pd.read_csv(
                filename, sep='\t', header=None, usecols=[0, 1], names=['name', 'length'],
                dtype={'name': str, 'length': int}, comment='#'
            )
            current = dict(zip(df['name'], df['length']))
        for name, length in current.items():
            if name in sizes:
                raise KeyError('Duplicate sequence name', name, filename)
            sizes[name] = int(length)
        log('loaded {} sequence sizes from {}'.format(len(current), filename))
    return sizes


def _load_fasta_sizes(filename):
    if filename.endswith('.gz'):
        with gzip.open(filename, 'rt') as fh:
            return {record.id: len(record.seq) for record in SeqIO.parse(fh, 'fasta')}
    with open(filename, 'r') as fh:
        return {record.id: len(record.seq) for record in SeqIO.parse(fh, 'fasta')}


class SequenceTable:
    """
    sequence names of one assembly mapped to their canonical ids and lengths. The input is a tab-delimited file with
    the columns ``name``, ``canonical_id`` and ``length``. Every name or alias of a sequence is given on its own row

    .. code-block:: text

        name    canonical_id    length
        chr1    chr1    248956422
        1   chr1    248956422
        NC_000001.11    chr1    248956422
    """

    def __init__(self, rows=None):
        self._by_name = {}
        self.lengths = {}
        for name, canonical_id, length in rows or []:
            self.add(name, canonical_id, length)

    def add(self, name, canonical_id, length):
        length = int(length)
        if name in self._by_name and self._by_name[name] != canonical_id:
            raise KeyError('sequence name assigned to more than one canonical id', name, self._by_name[name], canonical_id)
        if self.lengths.get(canonical_id, length) != length:
            raise KeyError('conflicting lengths for sequence', canonical_id, self.lengths[canonical_id], length)
        self._by_name[name] = canonical_id
        self._by_name.setdefault(canonical_id, canonical_id)
        self.lengths[canonical_id] = length

    def canonical_id(self, name):
        """
        Raises:
            SequenceNameError: the name is not in the table
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise SequenceNameError('sequence name not found in the sequence table', name)

    def length(self, name):
        return self.lengths[self.canonical_id(name)]

    def __contains__(self, name):
        return name in self._by_name

    def __len__(self):
        return len(self.lengths)


def load_sequence_table(filename):
    """
    Returns:
        SequenceTable: the sequence names table
    """
    df = pd.read_csv(filename, sep='\t', dtype=str)
    missing = {'name', 'canonical_id', 'length'} - set(df.columns)
    if missing:
        raise KeyError('sequence table is missing required columns', filename, sorted(missing))
    return SequenceTable(zip(df['name'], df['canonical_id'], df['length'].astype(int)))
