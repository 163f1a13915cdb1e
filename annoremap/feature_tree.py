"""
module holding the tree representation of a gene and its transcripts, exons and other sub-features
"""
from .constants import (
    FEATURE_TYPE,
    REMAP_NUM_MAPPINGS_ATTR,
    REMAP_STATUS,
    REMAP_STATUS_ATTR,
    REMAP_SUBSTITUTED_MISSING_TARGET_ATTR,
    REMAP_TARGET_STATUS_ATTR,
    SMALL_NON_CODING_BIOTYPES,
    TARGET_STATUS,
)
from .error import FeatureTreeError
from .gxf import get_base_id
from .interval import Interval


class FeatureNode:
    """
    a feature and its ordered sub-features. The node owns its feature and its children, the parent is a
    back-reference to the node which holds this one
    """

    def __init__(
            self, feature, remap_status=REMAP_STATUS.NONE, target_status=TARGET_STATUS.NA, num_mappings=0, src=None):
        """
        Args:
            feature (GxfFeature): the annotation record
            remap_status (REMAP_STATUS): outcome of mapping this feature
            target_status (TARGET_STATUS): relation of this feature to the target annotation
            num_mappings (int): number of target locations this feature mapped to
            src (FeatureNode): for mapped features, the source node this node was mapped from (not owned)
        """
        self.feature = feature
        self.parent = None
        self.children = []
        self.remap_status = REMAP_STATUS.enforce(remap_status)
        self.target_status = TARGET_STATUS.enforce(target_status)
        self.num_mappings = num_mappings
        self.src = src

    def add_child(self, node):
        """
        append a node to the children of this node

        Raises:
            FeatureTreeError: the node already has a parent
        """
        if node.parent is not None:
            raise FeatureTreeError('cannot add a node which already has a parent', node, node.parent)
        if node is self:
            raise FeatureTreeError('cannot add a node as its own child', node)
        node.parent = self
        self.children.append(node)
        return node

    def set_remap_status(self, status):
        self.remap_status = REMAP_STATUS.enforce(status)

    def rset_remap_status(self, status):
        """set the remap status of this node and every node below it"""
        for node in self.iter_nodes():
            node.set_remap_status(status)

    def set_target_status(self, status):
        self.target_status = TARGET_STATUS.enforce(status)

    def rset_target_status(self, status):
        for node in self.iter_nodes():
            node.set_target_status(status)

    def iter_nodes(self):
        """
        generator of the nodes of this subtree in preorder (the node first, then each child subtree in order)
        """
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def clone(self):
        """
        deep copy of this subtree. The copy shares nothing with this subtree and its root has no parent
        """
        node = FeatureNode(self.feature.copy(), self.remap_status, self.target_status, self.num_mappings, self.src)
        for child in self.children:
            node.add_child(child.clone())
        return node

    def get_matching(self, predicate):
        """
        Args:
            predicate (callable): function which takes a feature and returns True to select it

        Returns:
            :class:`list` of :class:`GxfFeature`: the selected features in preorder
        """
        return [node.feature for node in self.iter_nodes() if predicate(node.feature)]

    def get_matching_nodes(self, predicate):
        return [node for node in self.iter_nodes() if predicate(node.feature)]

    @property
    def seqid(self):
        return self.feature.seqid

    @property
    def strand(self):
        return self.feature.strand

    @property
    def start(self):
        return self.feature.start

    @property
    def end(self):
        return self.feature.end

    @property
    def location(self):
        return self.feature.location

    @property
    def type_id(self):
        return self.feature.type_id

    @property
    def base_id(self):
        return get_base_id(self.feature.type_id)

    @property
    def name(self):
        return self.feature.type_name

    def is_gene(self):
        return self.feature.type == FEATURE_TYPE.GENE

    def is_transcript(self):
        return self.feature.type == FEATURE_TYPE.TRANSCRIPT

    def is_exon(self):
        return self.feature.type == FEATURE_TYPE.EXON

    @property
    def transcripts(self):
        """:any:`list` of :class:`FeatureNode`: transcript nodes directly below this node"""
        return [child for child in self.children if child.is_transcript()]

    @property
    def exons(self):
        return self.get_matching_nodes(lambda f: f.type == FEATURE_TYPE.EXON)

    def is_automatic(self):
        """True when the feature comes from the automatic (ENSEMBL) annotation rather than manual curation"""
        return self.feature.is_automatic

    def is_pseudogene(self):
        biotype = self.feature.type_biotype
        return 'pseudogene' in biotype and biotype != 'polymorphic_pseudogene'

    def is_automatic_small_non_coding_gene(self):
        return self.is_gene() and self.is_automatic() and self.feature.type_biotype in SMALL_NON_CODING_BIOTYPES

    def get_exon_size(self):
        """number of bases covered by the exons of this transcript"""
        return sum([len(exon.location) for exon in self.exons])

    def get_exon_overlap(self, other):
        """number of bases of the exons of this transcript overlapping an exon of the other, same sequence and strand"""
        overlap = 0
        for exon in self.exons:
            for other_exon in other.exons:
                if exon.seqid != other_exon.seqid or exon.strand != other_exon.strand:
                    continue
                common = Interval.intersection(exon.location, other_exon.location)
                if common is not None:
                    overlap += len(common)
        return overlap

    def get_exon_similarity(self, other):
        """
        symmetric fraction of the exon bases of two transcripts which overlap an exon of the other transcript. Exons
        are compared on the same sequence and strand only

        Args:
            other (FeatureNode): the transcript to compare to

        Returns:
            float: between 0 and 1, 0 when either transcript has no exons

        Example:
            >>> t1.get_exon_similarity(t2)
            0.75
        """
        if not self.exons or not other.exons:
            return 0.0
        overlap = self.get_exon_overlap(other) + other.get_exon_overlap(self)
        return overlap / (self.get_exon_size() + other.get_exon_size())

    def get_max_transcript_similarity(self, gene2, manual_only_transcripts=False):
        """
        Args:
            gene2 (FeatureNode): the gene to compare to
            manual_only_transcripts (bool): skip the automatic transcripts of both genes

        Returns:
            float: the best exon similarity of any pair of transcripts from the two genes
        """
        best = 0.0
        for transcript2 in gene2.transcripts:
            if manual_only_transcripts and transcript2.is_automatic():
                continue
            for transcript1 in self.transcripts:
                if manual_only_transcripts and transcript1.is_automatic():
                    continue
                best = max(best, transcript1.get_exon_similarity(transcript2))
        return best

    def set_num_mappings_attr(self):
        self.feature.set_attr(REMAP_NUM_MAPPINGS_ATTR, self.num_mappings)

    def rset_remap_status_attr(self):
        """write the remap status of every node in the subtree as an attribute"""
        for node in self.iter_nodes():
            if node.remap_status == REMAP_STATUS.NONE:
                node.feature.remove_attr(REMAP_STATUS_ATTR)
            else:
                node.feature.set_attr(REMAP_STATUS_ATTR, node.remap_status)

    def rset_target_status_attr(self):
        for node in self.iter_nodes():
            if node.target_status == TARGET_STATUS.NA:
                node.feature.remove_attr(REMAP_TARGET_STATUS_ATTR)
            else:
                node.feature.set_attr(REMAP_TARGET_STATUS_ATTR, node.target_status)

    def rset_substituted_missing_target_attr(self, value):
        for node in self.iter_nodes():
            node.feature.set_attr(REMAP_SUBSTITUTED_MISSING_TARGET_ATTR, value)

    def write(self, writer):
        """
        write the subtree depth first, in the original child order

        Args:
            writer (GxfWriter): the output stream
        """
        for node in self.iter_nodes():
            writer.write_feature(node.feature)

    def dump(self, fh, indent=0):
        fh.write('{}{} [{}, {}, mappings={}]\n'.format(
            '    ' * indent, repr(self.feature), self.remap_status, self.target_status, self.num_mappings))
        for child in self.children:
            child.dump(fh, indent + 1)

    def __len__(self):
        """number of nodes in the subtree"""
        return sum([1 for _ in self.iter_nodes()])

    def __repr__(self):
        return 'FeatureNode({}, remap_status={}, target_status={})'.format(
            repr(self.feature), self.remap_status, self.target_status)
