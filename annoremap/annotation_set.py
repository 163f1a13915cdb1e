"""
module for the collection of gene trees loaded from an annotation file, indexed by id, name and location
"""
from intervaltree import IntervalTree

from .constants import FEATURE_TYPE
from .error import FeatureTreeError, GxfFormatError
from .gene_tree import GeneTree
from .gxf import GxfMetaRecord, GxfParser, get_base_id
from .util import DEVNULL

MAX_ENTRIES_PER_ID = 2
""":class:`int`: an id may be shared by the X and Y copies of a pseudoautosomal gene but no more"""


class LocationIndex:
    """
    interval index of feature nodes by sequence. Queries return the payloads in the order they were inserted
    """

    def __init__(self):
        self._trees = {}
        self._count = 0

    def insert(self, seqid, start, end, payload):
        """
        Args:
            seqid (str): the sequence
            start (int): start position (1-based, inclusive)
            end (int): end position (1-based, inclusive)
            payload: the object to index, not owned
        """
        self._trees.setdefault(seqid, IntervalTree()).addi(start, end + 1, (self._count, payload))
        self._count += 1

    def query(self, seqid, start, end):
        tree = self._trees.get(seqid)
        if tree is None:
            return []
        hits = sorted([itvl.data for itvl in tree.overlap(start, end + 1)], key=lambda d: d[0])
        return [payload for _, payload in hits]

    def clear(self):
        self._trees = {}
        self._count = 0

    def __len__(self):
        return self._count


class AnnotationSet:
    """
    gene trees of one annotation file

    The id and name maps cover genes and transcripts. Keys are the ids without their version or pseudoautosomal
    suffix. The location index holds every node of every gene and must not outlive the genes, :meth:`close` drops
    it first
    """

    def __init__(self, filename=None, gxf_format=None, log=DEVNULL):
        self.genes = []
        self.location_index = LocationIndex()
        self._by_id = {}
        self._by_name = {}
        self.closed = False
        self.filename = filename
        if filename is not None:
            with GxfParser(filename, gxf_format) as parser:
                self.load(parser)
            log('loaded {} genes from {}'.format(len(self.genes), filename))

    def load(self, parser):
        """
        read every gene of a record stream

        Raises:
            GxfFormatError: a feature outside of a gene or otherwise malformed input
        """
        while True:
            record = parser.read()
            if record is None:
                break
            if isinstance(record, GxfMetaRecord):
                continue
            if record.type != FEATURE_TYPE.GENE:
                raise GxfFormatError('{}:{}: {} record outside of a gene'.format(
                    parser.filename, parser.line_number, record.type), record)
            self.add_gene(GeneTree.factory(parser, record))

    def _check_open(self):
        if self.closed:
            raise FeatureTreeError('annotation set has been closed', self.filename)

    def _add_id(self, node):
        key = node.base_id
        if not key:
            return
        entries = self._by_id.setdefault(key, [])
        if len(entries) >= MAX_ENTRIES_PER_ID:
            raise GxfFormatError('{} is used by more than {} features'.format(key, MAX_ENTRIES_PER_ID), node.feature)
        entries.append(node)

    def _add_name(self, node):
        if node.name:
            self._by_name.setdefault(node.name, []).append(node)

    def add_gene(self, gene):
        self._check_open()
        self.genes.append(gene)
        for node in gene.iter_nodes():
            if node.is_gene() or node.is_transcript():
                self._add_id(node)
                self._add_name(node)
            self.location_index.insert(node.seqid, node.start, node.end, node)

    @staticmethod
    def _select(entries, seqid):
        if not entries:
            return None
        for node in entries:
            if node.seqid == seqid:
                return node
        return entries[0]

    def get_feature_by_id(self, feature_id, seqid=None):
        """
        Args:
            feature_id (str): gene or transcript id, with or without a version
            seqid (str): preferred sequence when the id is shared by pseudoautosomal copies

        Returns:
            FeatureNode: the node, None when the id is not found
        """
        self._check_open()
        return self._select(self._by_id.get(get_base_id(feature_id)), seqid)

    def get_feature_by_name(self, name, seqid=None):
        self._check_open()
        return self._select(self._by_name.get(name), seqid)

    def find_overlapping_features(self, seqid, start, end, strand=None, predicate=None):
        """
        Returns:
            :class:`list` of :class:`FeatureNode`: the overlapping nodes in load order
        """
        self._check_open()
        result = []
        for node in self.location_index.query(seqid, start, end):
            if strand is not None and node.strand != strand:
                continue
            if predicate is not None and not predicate(node):
                continue
            result.append(node)
        return result

    def find_overlapping_genes(self, gene, min_similarity=0.0, manual_only_transcripts=False):
        """
        genes of this set overlapping the given gene (on the same strand), scored by transcript similarity

        Args:
            gene (FeatureNode): the gene to compare, usually from a different annotation set
            min_similarity (float): the minimum score of the genes returned
            manual_only_transcripts (bool): only score the manually curated transcripts of the candidates

        Returns:
            :class:`list` of :class:`tuple` of :class:`FeatureNode` and :class:`float`: the genes and their scores
            in load order
        """
        result = []
        candidates = self.find_overlapping_features(
            gene.seqid, gene.start, gene.end, gene.strand, predicate=lambda n: n.is_gene())
        for candidate in candidates:
            score = gene.get_max_transcript_similarity(candidate, manual_only_transcripts)
            if score >= min_similarity:
                result.append((candidate, score))
        return result

    def get_genes(self):
        self._check_open()
        return list(self.genes)

    def sort(self):
        """sort the genes for output. The location index keeps the load order"""
        self._check_open()
        self.genes.sort(key=lambda g: (g.seqid, g.start, -g.end))

    def write(self, writer):
        self._check_open()
        for gene in self.genes:
            gene.write(writer)

    def dump(self, fh):
        self._check_open()
        for gene in self.genes:
            gene.dump(fh)

    def close(self):
        """
        release the location index and then the genes

        Raises:
            FeatureTreeError: the set was already closed
        """
        self._check_open()
        self.location_index.clear()
        self._by_id = {}
        self._by_name = {}
        self.genes = []
        self.closed = True

    def __len__(self):
        return len(self.genes)

    def __iter__(self):
        return iter(self.genes)

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        if not self.closed:
            self.close()
