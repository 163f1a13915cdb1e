import os

from annoremap.constants import FEATURE_TYPE, SOURCE, STRAND
from annoremap.feature_tree import FeatureNode
from annoremap.gxf import GxfAttr, GxfFeature

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


def get_data(*paths):
    return os.path.join(DATA_DIR, *paths)


def make_feature(feature_type, start, end, seqid='chr1', strand=STRAND.POS, source=SOURCE.HAVANA, **attrs):
    return GxfFeature(
        seqid, source, feature_type, start, end, strand=strand,
        attrs=[GxfAttr(name, value) for name, value in attrs.items()])


def make_gene(gene_id, transcripts, seqid='chr1', strand=STRAND.POS, source=SOURCE.HAVANA, biotype='protein_coding',
              name=None, transcript_sources=None):
    """
    build a gene tree from exon coordinates

    Args:
        gene_id (str): the gene id
        transcripts (list): a list of exon (start, end) lists, one per transcript
        transcript_sources (list): the source of each transcript, defaults to the gene source
    """
    exons = [exon for transcript in transcripts for exon in transcript]
    start = min([s for s, _ in exons])
    end = max([e for _, e in exons])
    gene_attrs = {'ID': gene_id, 'gene_id': gene_id, 'gene_type': biotype}
    if name:
        gene_attrs['gene_name'] = name
    gene = FeatureNode(make_feature(FEATURE_TYPE.GENE, start, end, seqid, strand, source, **gene_attrs))
    for i, transcript_exons in enumerate(transcripts):
        transcript_id = '{}-T{}'.format(gene_id, i + 1)
        transcript_source = transcript_sources[i] if transcript_sources else source
        transcript = gene.add_child(FeatureNode(make_feature(
            FEATURE_TYPE.TRANSCRIPT,
            min([s for s, _ in transcript_exons]), max([e for _, e in transcript_exons]),
            seqid, strand, transcript_source,
            ID=transcript_id, Parent=gene_id, transcript_id=transcript_id, transcript_type=biotype)))
        for j, (exon_start, exon_end) in enumerate(transcript_exons):
            transcript.add_child(FeatureNode(make_feature(
                FEATURE_TYPE.EXON, exon_start, exon_end, seqid, strand, transcript_source,
                ID='exon:{}:{}'.format(transcript_id, j + 1), Parent=transcript_id)))
    return gene
