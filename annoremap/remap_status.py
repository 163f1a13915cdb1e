"""
module responsible for classifying the outcome of mapping features to the target assembly and for holding the
resulting feature trees of each source gene
"""
import networkx as nx

from .constants import (
    MAPPED_REMAP_STATUSES,
    REMAP_STATUS,
    TARGET_STATUS,
    UNMAPPED_REMAP_STATUSES,
    most_severe_remap_status,
)
from .error import FeatureTreeError
from .feature_tree import FeatureNode
from .interval import Interval


def classify_remap_status(projection):
    """
    status of a single feature from the raw projection of its source interval

    Args:
        projection (Projection): the result of :meth:`ChainIndex.project`

    Returns:
        REMAP_STATUS: the status
    """
    if not projection.mapped:
        if not projection.src_seq_in_mapping:
            return REMAP_STATUS.NO_SEQ_MAP
        return REMAP_STATUS.DELETED
    if len(projection.mapped) == 1 and not projection.unmapped:
        if projection.mapped[0].block_count == 1:
            return REMAP_STATUS.FULL_CONTIG
        return REMAP_STATUS.FULL_FRAGMENT
    return REMAP_STATUS.PARTIAL


def calc_bounding_remap_status(child_statuses, src_seq_in_mapping, num_loci=1):
    """
    status of a gene or transcript from the statuses of its children

    Args:
        child_statuses (:class:`list` of :class:`REMAP_STATUS`): statuses of the children
        src_seq_in_mapping (bool): the source sequence of the feature is covered by the alignment chains. When True,
            NO_SEQ_MAP is reported as DELETED
        num_loci (int): number of distinct target locations the mapped children were grouped into

    Returns:
        REMAP_STATUS: the status

    Example:
        >>> calc_bounding_remap_status(['full_contig', 'partial'], True)
        'partial'
        >>> calc_bounding_remap_status(['full_contig', 'deleted'], True)
        'partial'
    """
    if not child_statuses:
        return REMAP_STATUS.NONE
    mapped = [s for s in child_statuses if s in MAPPED_REMAP_STATUSES]
    unmapped = [s for s in child_statuses if s in UNMAPPED_REMAP_STATUSES]
    if mapped:
        if unmapped or num_loci > 1:
            return REMAP_STATUS.PARTIAL
        return most_severe_remap_status(*mapped)
    status = most_severe_remap_status(*unmapped)
    if status == REMAP_STATUS.NO_SEQ_MAP and src_seq_in_mapping:
        return REMAP_STATUS.DELETED
    return status


class TransMappedFeature:
    """
    the mapped and unmapped forms of one source feature

    Attributes:
        src (FeatureNode): the source feature, not owned
        mapped (:class:`list` of :class:`FeatureNode`): one node per target location
        unmapped (:class:`list` of :class:`FeatureNode`): copy of the source feature holding the unmapped children,
            or the whole source feature when nothing mapped
        remap_status (REMAP_STATUS): the status of the feature
    """

    def __init__(self, src, mapped, unmapped, remap_status):
        self.src = src
        self.mapped = mapped
        self.unmapped = unmapped
        self.remap_status = remap_status

    @classmethod
    def from_projection(cls, src, projection):
        """
        map a leaf feature (exon, CDS, UTR, or a childless transcript)
        """
        status = classify_remap_status(projection)
        mapped = []
        unmapped = []
        for piece in projection.mapped:
            feature = src.feature.copy(seqid=piece.seqid, start=piece.start, end=piece.end, strand=piece.strand)
            mapped.append(FeatureNode(feature, status, num_mappings=len(projection.mapped), src=src))
        if not mapped:
            unmapped.append(FeatureNode(src.feature.copy(), status, src=src))
        return cls(src, mapped, unmapped, status)

    @classmethod
    def from_children(cls, src, children, src_seq_in_mapping):
        """
        map a bounding feature (gene or transcript) from its mapped children. Mapped children on different target
        sequences or strands give separate copies of the bounding feature, spanning their children

        Args:
            src (FeatureNode): the source bounding feature
            children (:class:`list` of :class:`TransMappedFeature`): the mapped children in source order
            src_seq_in_mapping (bool): see :func:`calc_bounding_remap_status`
        """
        groups = {}
        for child in children:
            for node in child.mapped:
                groups.setdefault((node.seqid, node.strand), []).append(node)
        status = calc_bounding_remap_status(
            [c.remap_status for c in children], src_seq_in_mapping, num_loci=len(groups))
        mapped = []
        for (seqid, strand), nodes in groups.items():
            span = Interval.union(*[n.location for n in nodes])
            bounding = FeatureNode(
                src.feature.copy(seqid=seqid, strand=strand, start=span.start, end=span.end),
                status, num_mappings=len(groups), src=src)
            for node in nodes:
                bounding.add_child(node)
            mapped.append(bounding)
        unmapped = []
        lost = [node for child in children for node in child.unmapped]
        if lost:
            bounding = FeatureNode(src.feature.copy(), status, num_mappings=len(groups), src=src)
            for node in lost:
                bounding.add_child(node)
            unmapped.append(bounding)
        return cls(src, mapped, unmapped, status)


def _compatible_transcripts(first, second, gene_conflict_slop=0):
    """
    True when two mapped transcripts keep the placement their source transcripts had relative to each other.
    Transcripts which overlapped in the source must still overlap (or lie within the slop) in the target. Transcripts
    which did not overlap must not overlap in the target and must keep their order, reversed when the mapping
    flipped the strand
    """
    if first.seqid != second.seqid or first.strand != second.strand:
        return False
    if Interval.overlaps(first.src.location, second.src.location):
        return Interval.dist(first.location, second.location) <= gene_conflict_slop
    if Interval.overlaps(first.location, second.location):
        return False
    src_before = first.src.start < second.src.start
    target_before = first.start < second.start
    if first.strand != first.src.strand:
        target_before = not target_before
    return src_before == target_before


def has_gene_conflict(mapped_genes, gene_conflict_slop=0):
    """
    True when the mapped transcripts of a gene do not form a single locus. The gene is in conflict when it was mapped
    to more than one target sequence or strand, or when linking each pair of compatible transcripts (see
    :func:`_compatible_transcripts`) leaves more than one connected component. Changes in the distance between
    transcripts alone are left to the gene size check

    Args:
        mapped_genes (:class:`list` of :class:`FeatureNode`): the mapped copies of the gene
        gene_conflict_slop (int): distance allowed between mapped transcripts whose source transcripts overlapped
    """
    if len(mapped_genes) > 1:
        return True
    transcripts = [t for gene in mapped_genes for t in gene.transcripts]
    graph = nx.Graph()
    graph.add_nodes_from(range(len(transcripts)))
    for i, first in enumerate(transcripts):
        for j in range(i + 1, len(transcripts)):
            if _compatible_transcripts(first, transcripts[j], gene_conflict_slop):
                graph.add_edge(i, j)
    return nx.number_connected_components(graph) > 1


def has_gene_size_change(src_gene, mapped_genes, max_gene_size_change=0.5):
    """
    True when the extent of the mapped gene differs from the source gene by more than the given fraction of the
    source gene length
    """
    if len(mapped_genes) != 1:
        return False
    src_len = len(src_gene.location)
    mapped_len = len(mapped_genes[0].location)
    return abs(mapped_len - src_len) > max_gene_size_change * src_len


def gene_override_status(src_gene, mapped_genes, gene_conflict_slop=0, max_gene_size_change=0.5):
    """
    Returns:
        REMAP_STATUS: GENE_CONFLICT or GENE_SIZE_CHANGE when the mapping of the gene is not usable as is, otherwise
        None. GENE_CONFLICT is returned when both apply
    """
    if not mapped_genes:
        return None
    if has_gene_conflict(mapped_genes, gene_conflict_slop):
        return REMAP_STATUS.GENE_CONFLICT
    if has_gene_size_change(src_gene, mapped_genes, max_gene_size_change):
        return REMAP_STATUS.GENE_SIZE_CHANGE
    return None


class ResultFeatureTrees:
    """
    the trees resulting from mapping one source gene

    Attributes:
        src (FeatureNode): the source gene, owned by the source annotation set
        mapped (FeatureNode): the gene as mapped to the target assembly
        unmapped (FeatureNode): the parts of the gene which could not be mapped (or the whole gene)
        target (FeatureNode): a gene of the target annotation substituted for the lost gene
    """

    def __init__(self, src, mapped=None, unmapped=None, target=None):
        self.src = src
        self.mapped = mapped
        self.unmapped = unmapped
        self.target = target
        self.freed = False

    def _status_trees(self):
        return [tree for tree in (self.mapped, self.unmapped) if tree is not None]

    def get_remap_status(self):
        """the status of the first of the mapped, unmapped or target trees which is present"""
        for tree in (self.mapped, self.unmapped, self.target):
            if tree is not None:
                return tree.remap_status
        return REMAP_STATUS.DELETED

    def get_target_status(self):
        for tree in (self.mapped, self.unmapped, self.target):
            if tree is not None:
                return tree.target_status
        return TARGET_STATUS.LOST

    def get_num_mappings(self):
        """the number of target loci, taken from the mapped tree when present, otherwise the unmapped tree"""
        trees = self._status_trees()
        return trees[0].num_mappings if trees else 0

    def has_mapped(self):
        return self.mapped is not None

    def has_unmapped(self):
        return self.unmapped is not None

    def set_remap_status(self, status):
        for tree in self._status_trees():
            tree.set_remap_status(status)

    def rset_remap_status(self, status):
        for tree in self._status_trees():
            tree.rset_remap_status(status)

    def set_target_status(self, status):
        for tree in self._status_trees():
            tree.set_target_status(status)

    def rset_target_status(self, status):
        for tree in self._status_trees():
            tree.rset_target_status(status)

    def set_num_mappings_attr(self):
        for tree in self._status_trees():
            for node in tree.iter_nodes():
                if node.is_gene() or node.is_transcript():
                    node.set_num_mappings_attr()

    def rset_remap_status_attr(self):
        for tree in self._status_trees():
            tree.rset_remap_status_attr()

    def rset_target_status_attr(self):
        for tree in (self.mapped, self.unmapped, self.target):
            if tree is not None:
                tree.rset_target_status_attr()

    def set_target(self, target):
        if self.target is not None:
            raise FeatureTreeError('result already has a target substitution', self.src)
        self.target = target

    def free_mapped(self):
        """
        Raises:
            FeatureTreeError: there is no mapped tree to release
        """
        if self.mapped is None:
            raise FeatureTreeError('no mapped tree to release', self.src)
        mapped, self.mapped = self.mapped, None
        return mapped

    def free_unmapped(self):
        if self.unmapped is None:
            raise FeatureTreeError('no unmapped tree to release', self.src)
        unmapped, self.unmapped = self.unmapped, None
        return unmapped

    def free(self):
        """
        release all the trees. The source tree is not owned and is only dropped

        Raises:
            FeatureTreeError: the result was already released
        """
        if self.freed:
            raise FeatureTreeError('result trees released twice', self.src)
        self.mapped = None
        self.unmapped = None
        self.target = None
        self.freed = True

    def write(self, mapped_writer, unmapped_writer=None):
        if self.freed:
            raise FeatureTreeError('cannot write released result trees', self.src)
        if self.mapped is not None:
            self.mapped.write(mapped_writer)
        if self.target is not None:
            self.target.write(mapped_writer)
        if self.unmapped is not None and unmapped_writer is not None:
            self.unmapped.write(unmapped_writer)

    def dump(self, fh):
        fh.write('src: {}\n'.format(repr(self.src)))
        for label, tree in [('mapped', self.mapped), ('unmapped', self.unmapped), ('target', self.target)]:
            fh.write('{}:{}\n'.format(label, '' if tree is not None else ' None'))
            if tree is not None:
                tree.dump(fh, 1)

    def __repr__(self):
        return 'ResultFeatureTrees({}, remap_status={}, target_status={})'.format(
            self.src.type_id, self.get_remap_status(), self.get_target_status())


class ResultFeatureTreesVector(list):
    """
    the results of a mapping run in source order
    """

    def have_mapped(self):
        return any([r.has_mapped() for r in self])

    def have_unmapped(self):
        return any([r.has_unmapped() for r in self])

    def count_by_remap_status(self):
        counts = {}
        for result in self:
            status = result.get_remap_status()
            counts[status] = counts.get(status, 0) + 1
        return counts

    def free(self):
        for result in self:
            result.free()
