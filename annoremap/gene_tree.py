"""
builds the feature tree of one gene from a stream of annotation records
"""
import re

from .constants import FEATURE_TYPE, GXF_FORMAT
from .error import GxfFormatError, ParentResolutionError
from .feature_tree import FeatureNode
from .gxf import GxfMetaRecord

GTF_GENE_EXCLUDED_ATTRS = re.compile(r'^(transcript|exon)_')
GTF_TRANSCRIPT_EXCLUDED_ATTRS = re.compile(r'^exon_')


class GeneTree:
    """
    Reads the records following a gene record up to the next gene (or the end of the input) and nests them below
    the gene. Records are attached to their parent as soon as the parent is in the tree; records seen before their
    parent are queued and retried every time another record is placed
    """

    def __init__(self, gxf_format, gene_feature):
        if gene_feature.type != FEATURE_TYPE.GENE:
            raise GxfFormatError('gene tree must start with a gene record', gene_feature)
        self.gxf_format = GXF_FORMAT.enforce(gxf_format)
        self.gene = FeatureNode(gene_feature)
        self.queued = []
        self._nodes_by_id = {}
        self._transcripts_by_id = {}
        self._last_transcript = None
        if self.gxf_format == GXF_FORMAT.GFF3 and gene_feature.get_attr_value('ID'):
            self._nodes_by_id[gene_feature.get_attr_value('ID')] = self.gene

    @classmethod
    def factory(cls, parser, gene_feature):
        """
        Args:
            parser (GxfParser): the record stream, positioned after the gene record
            gene_feature (GxfFeature): the gene record

        Returns:
            FeatureNode: the root of the gene tree

        Raises:
            ParentResolutionError: some records of the gene refer to a parent which is not part of the gene
        """
        builder = cls(parser.gxf_format, gene_feature)
        builder.queue_records(parser)
        builder.check_resolved()
        if builder.gxf_format == GXF_FORMAT.GTF:
            builder.fix_gtf_annotations()
        return builder.gene

    def queue_records(self, parser):
        while True:
            record = parser.read()
            if record is None:
                break
            if isinstance(record, GxfMetaRecord):
                continue
            if record.type == FEATURE_TYPE.GENE:
                parser.push(record)
                break
            self.process_record(record)

    def process_record(self, record):
        if self.place(record):
            self.retry_queued()
        else:
            self.queued.append(record)

    def retry_queued(self):
        progress = True
        while progress and self.queued:
            progress = False
            for record in list(self.queued):
                if self.place(record):
                    self.queued.remove(record)
                    progress = True

    def check_resolved(self):
        if self.queued:
            raise ParentResolutionError(
                'could not find the parent of {} record(s) of gene {}: {}'.format(
                    len(self.queued), self.gene.type_id, ', '.join([repr(r) for r in self.queued])))

    def place(self, record):
        """
        attach a record to its parent

        Returns:
            bool: False if the parent is not yet in the tree
        """
        if self.gxf_format == GXF_FORMAT.GFF3:
            parent = self.find_gff3_parent(record)
        else:
            parent = self.find_gtf_parent(record)
        if parent is None:
            return False
        node = parent.add_child(FeatureNode(record))
        if self.gxf_format == GXF_FORMAT.GFF3:
            if record.get_attr_value('ID'):
                self._nodes_by_id[record.get_attr_value('ID')] = node
        elif record.type == FEATURE_TYPE.TRANSCRIPT:
            self._transcripts_by_id[record.type_id] = node
            self._last_transcript = node
        return True

    def find_gff3_parent(self, record):
        parent_ids = record.parent_ids
        if not parent_ids:
            raise GxfFormatError('record within gene {} has no Parent attribute'.format(self.gene.type_id), record)
        return self._nodes_by_id.get(parent_ids[0])

    def find_gtf_parent(self, record):
        gene_id = record.get_attr_value('gene_id')
        if gene_id and gene_id != self.gene.type_id:
            raise GxfFormatError(
                'record of gene {} found within the records of gene {}'.format(gene_id, self.gene.type_id), record)
        if record.type == FEATURE_TYPE.TRANSCRIPT:
            return self.gene
        transcript_id = record.get_attr_value('transcript_id')
        if transcript_id:
            return self._transcripts_by_id.get(transcript_id)
        return self._last_transcript

    def remove_trans_attrs_on_genes(self):
        feature = self.gene.feature
        for attr in list(feature.attrs):
            if GTF_GENE_EXCLUDED_ATTRS.match(attr.name):
                feature.remove_attr(attr.name)

    def fix_gtf_annotations(self):
        """
        flat GTF records repeat the attributes of their children on the gene and transcript lines
        """
        self.remove_trans_attrs_on_genes()
        for transcript in self.gene.transcripts:
            feature = transcript.feature
            for attr in list(feature.attrs):
                if GTF_TRANSCRIPT_EXCLUDED_ATTRS.match(attr.name):
                    feature.remove_attr(attr.name)
