"""
module responsible for mapping the genes of an annotation set to the target assembly
"""
from .annotation_set import AnnotationSet
from .chain import ChainIndex
from .constants import (
    REMAP_ORIGINAL_LOCATION_ATTR,
    REMAP_STATUS,
    TARGET_STATUS,
    UNUSABLE_REMAP_STATUSES,
    float_fraction,
)
from .file_io import load_sequence_sizes
from .gxf import GxfWriter, guess_format
from .interval import Interval
from .remap_status import ResultFeatureTrees, ResultFeatureTreesVector, TransMappedFeature, gene_override_status
from .util import LOG, WeakAnnoremapNamespace, filepath


DEFAULTS = WeakAnnoremapNamespace()
DEFAULTS.add(
    'min_rescue_similarity', 0.5, cast_type=float_fraction,
    defn='the minimum exon similarity (between 0 and 1) of a target gene to be substituted for a lost gene')
DEFAULTS.add(
    'manual_only_transcripts', False, cast_type=bool,
    defn='only compare the manually curated transcripts of target genes when choosing a substitute')
DEFAULTS.add(
    'max_gene_size_change', 0.5, cast_type=float,
    defn='the maximum change in length of a mapped gene, as a fraction of the source gene length, before it is '
    'considered a size change')
DEFAULTS.add(
    'gene_conflict_slop', 0, cast_type=int,
    defn='the distance (in base pairs) allowed between mapped transcripts whose source transcripts overlapped before '
    'the gene is considered to be in conflict')
DEFAULTS.add(
    'min_chain_score', None, cast_type=float, nullable=True,
    defn='alignment chains with a lower score are ignored')
DEFAULTS.add(
    'substitute_missing_targets', True, cast_type=bool,
    defn='substitute the most similar target gene for genes which could not be mapped')

TARGET_DEFAULTS = WeakAnnoremapNamespace()
TARGET_DEFAULTS.add(
    'target_annotations', None, cast_type=filepath, nullable=True,
    defn='annotation of the target assembly, used to compute target status and substitute lost genes')
TARGET_DEFAULTS.add(
    'target_sizes', None, cast_type=filepath, nullable=True,
    defn='fasta file or tab-delimited table of the target assembly sequence lengths, for the sequence-region headers')


class GeneMapper:
    """
    maps source genes through the alignment chains, classifies them and substitutes lost genes from the target
    annotation
    """

    def __init__(
            self, chain_index, target_set=None,
            min_rescue_similarity=DEFAULTS.min_rescue_similarity,
            manual_only_transcripts=DEFAULTS.manual_only_transcripts,
            max_gene_size_change=DEFAULTS.max_gene_size_change,
            gene_conflict_slop=DEFAULTS.gene_conflict_slop,
            substitute_missing_targets=DEFAULTS.substitute_missing_targets,
            log=LOG):
        self.chain_index = chain_index
        self.target_set = target_set
        self.min_rescue_similarity = min_rescue_similarity
        self.manual_only_transcripts = manual_only_transcripts
        self.max_gene_size_change = max_gene_size_change
        self.gene_conflict_slop = gene_conflict_slop
        self.substitute_missing_targets = substitute_missing_targets
        self.log = log
        self.substituted = set()

    def map_node(self, src, src_seq_in_mapping):
        """
        Returns:
            TransMappedFeature: the mapped forms of the source node and its subtree
        """
        if not src.children:
            projection = self.chain_index.project(src.seqid, src.start, src.end, src.strand)
            return TransMappedFeature.from_projection(src, projection)
        children = [self.map_node(child, src_seq_in_mapping) for child in src.children]
        return TransMappedFeature.from_children(src, children, src_seq_in_mapping)

    def map_gene(self, src_gene):
        """
        Args:
            src_gene (FeatureNode): gene from the source annotation set

        Returns:
            ResultFeatureTrees: the mapped and unmapped trees, with a target substitution where applicable
        """
        src_seq_in_mapping = self.chain_index.has_source_sequence(src_gene.seqid)
        trans_mapped = self.map_node(src_gene, src_seq_in_mapping)

        override = None
        if trans_mapped.mapped and not (
                src_gene.is_automatic_small_non_coding_gene() and len(trans_mapped.mapped) == 1):
            override = gene_override_status(
                src_gene, trans_mapped.mapped, self.gene_conflict_slop, self.max_gene_size_change)

        if override:
            result = ResultFeatureTrees(src_gene, unmapped=src_gene.clone())
            result.rset_remap_status(override)
            result.unmapped.num_mappings = len(trans_mapped.mapped)
        else:
            result = ResultFeatureTrees(
                src_gene,
                mapped=trans_mapped.mapped[0] if trans_mapped.mapped else None,
                unmapped=trans_mapped.unmapped[0] if trans_mapped.unmapped else None,
            )
            if result.mapped is not None:
                self._set_original_location(result.mapped)
        self.set_target_status(result)

        if result.get_remap_status() in UNUSABLE_REMAP_STATUSES and self.substitute_missing_targets \
                and not src_gene.is_automatic_small_non_coding_gene():
            anchor = trans_mapped.mapped[0] if trans_mapped.mapped else None
            self.rescue(result, anchor)

        result.set_num_mappings_attr()
        result.rset_remap_status_attr()
        result.rset_target_status_attr()
        return result

    def _set_original_location(self, mapped_gene):
        for node in mapped_gene.iter_nodes():
            if (node.is_gene() or node.is_transcript()) and node.src is not None:
                node.feature.set_attr(REMAP_ORIGINAL_LOCATION_ATTR, node.src.feature.location_str())

    def _find_target_counterpart(self, node):
        if self.target_set is None:
            return None
        target = self.target_set.get_feature_by_id(node.type_id, node.seqid)
        if target is None and node.name:
            target = self.target_set.get_feature_by_name(node.name, node.seqid)
            if target is not None and target.feature.type != node.feature.type:
                target = None
        return target

    def _mapped_target_status(self, node):
        target = self.target_set.get_feature_by_id(node.type_id, node.seqid)
        if target is None:
            return TARGET_STATUS.NEW
        if target.seqid == node.seqid and Interval.overlaps(target.location, node.location):
            return TARGET_STATUS.OK
        return TARGET_STATUS.NONOVERLAP

    def set_target_status(self, result):
        """
        compare the mapped gene and transcripts to the features with the same id in the target annotation. Unmapped
        trees are always LOST
        """
        if result.unmapped is not None:
            result.unmapped.rset_target_status(TARGET_STATUS.LOST)
        if result.mapped is None or self.target_set is None:
            return
        result.mapped.rset_target_status(self._mapped_target_status(result.mapped))
        for transcript in result.mapped.transcripts:
            transcript.rset_target_status(self._mapped_target_status(transcript))

    def rescue(self, result, anchor=None):
        """
        substitute the target gene most similar to a lost gene

        Args:
            result (ResultFeatureTrees): the result for the lost gene
            anchor (FeatureNode): the partially mapped gene, locates and scores the candidates. When not given the
                target gene with the same id or name is used

        Returns:
            FeatureNode: the substituted gene, None if no candidate qualified
        """
        if self.target_set is None:
            return None
        src_gene = result.src
        reference = anchor if anchor is not None else self._find_target_counterpart(src_gene)
        if reference is None:
            return None
        best, best_score = None, None
        for candidate, score in self.target_set.find_overlapping_genes(
                reference, self.min_rescue_similarity, self.manual_only_transcripts):
            if candidate.is_pseudogene() != src_gene.is_pseudogene():
                continue
            if candidate in self.substituted:
                continue
            if best_score is None or score > best_score:
                best, best_score = candidate, score
        if best is None:
            return None
        self.substituted.add(best)
        target = best.clone()
        target.rset_target_status(TARGET_STATUS.SUBSTITUTED)
        target.rset_substituted_missing_target_attr(src_gene.type_id)
        result.set_target(target)
        self.log('substituted {} for lost gene {} (similarity {:.2f})'.format(
            best.type_id, src_gene.type_id, best_score))
        return target

    def map_all(self, src_set):
        """
        Returns:
            ResultFeatureTreesVector: one result per source gene, in source order
        """
        results = ResultFeatureTreesVector()
        for src_gene in src_set:
            results.append(self.map_gene(src_gene))
        return results

    def map_genes(self, src_set, mapped_writer, unmapped_writer=None):
        """
        map, classify and write every gene of a source annotation set

        Returns:
            :class:`dict` of :class:`int` by :class:`REMAP_STATUS`: number of genes by remap status
        """
        counts = {}
        for src_gene in src_set:
            result = self.map_gene(src_gene)
            result.write(mapped_writer, unmapped_writer)
            status = result.get_remap_status()
            counts[status] = counts.get(status, 0) + 1
            result.free()
        return counts


def main(
        annotations, chains, mapped, unmapped,
        target_annotations=None, target_sizes=None,
        min_chain_score=DEFAULTS.min_chain_score,
        log=LOG, **kwargs):
    """
    Args:
        annotations (str): path to the source assembly annotation
        chains (str): path to the alignment chains from the source to the target assembly
        mapped (str): path to the output of the mapped (and substituted) genes
        unmapped (str): path to the output of the genes and features which could not be mapped
        target_annotations (str): path to the target assembly annotation
        target_sizes (str): path to the target assembly sequence lengths
    """
    chain_index = ChainIndex.from_file(chains, min_score=min_chain_score, log=log)
    sequence_sizes = dict(chain_index.target_sizes)
    if target_sizes:
        sequence_sizes.update(load_sequence_sizes(target_sizes, log=log))

    gxf_format = guess_format(annotations)
    src_set = AnnotationSet(annotations, gxf_format, log=log)
    target_set = AnnotationSet(target_annotations, log=log) if target_annotations else None

    mapper = GeneMapper(
        chain_index, target_set,
        **{k: v for k, v in kwargs.items() if k in DEFAULTS},
        log=log)
    with GxfWriter(mapped, gxf_format, sequence_sizes=sequence_sizes) as mapped_writer, \
            GxfWriter(unmapped, gxf_format, sequence_sizes=dict(chain_index.source_sizes)) as unmapped_writer:
        counts = mapper.map_genes(src_set, mapped_writer, unmapped_writer)

    log('mapped {} genes'.format(sum(counts.values())))
    with log.indent() as ilog:
        for status in REMAP_STATUS.values():
            if status in counts:
                ilog('{}: {}'.format(status, counts[status]))
    if target_set is not None:
        log('substituted {} target genes'.format(len(mapper.substituted)))
        target_set.close()
    src_set.close()
    return counts
