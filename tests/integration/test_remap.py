import pytest

from annoremap import chain_edit, mapper
from annoremap.annotation_set import AnnotationSet
from annoremap.constants import REMAP_STATUS
from annoremap.util import DEVNULL

from ..util import get_data


def read_lines(filename):
    with open(filename) as fh:
        return [line.rstrip('\n') for line in fh]


@pytest.fixture
def remap_output(tmp_path):
    mapped = str(tmp_path / 'mapped.gff3')
    unmapped = str(tmp_path / 'unmapped.gff3')
    counts = mapper.main(
        get_data('source.gff3'), get_data('source_to_target.chain'), mapped, unmapped,
        target_annotations=get_data('target.gff3'), target_sizes=get_data('target.sizes'), log=DEVNULL)
    return counts, mapped, unmapped


class TestRemap:
    def test_counts(self, remap_output):
        counts, _, _ = remap_output
        assert counts == {
            REMAP_STATUS.FULL_CONTIG: 1,
            REMAP_STATUS.FULL_FRAGMENT: 1,
            REMAP_STATUS.PARTIAL: 1,
            REMAP_STATUS.DELETED: 2,
            REMAP_STATUS.GENE_CONFLICT: 1,
            REMAP_STATUS.NO_SEQ_MAP: 1,
        }

    def test_mapped_headers(self, remap_output):
        _, mapped, _ = remap_output
        lines = read_lines(mapped)
        assert lines[0] == '##gff-version 3'
        assert [line for line in lines if line.startswith('##sequence-region')] == ['##sequence-region chr1 1 10100']

    def test_unmapped_headers(self, remap_output):
        _, _, unmapped = remap_output
        lines = read_lines(unmapped)
        assert [line for line in lines if line.startswith('##sequence-region')] == [
            '##sequence-region chr1 1 10000', '##sequence-region chr2'
        ]

    def test_mapped_genes(self, remap_output):
        _, mapped, _ = remap_output
        with AnnotationSet(mapped) as annotations:
            assert len(annotations) == 4
            gene_a = annotations.get_feature_by_id('ENSG00000000001')
            assert gene_a.feature.get_attr_value('remap_status') == 'full_contig'
            assert gene_a.feature.get_attr_value('remap_target_status') == 'ok'
            assert gene_a.feature.get_attr_value('remap_original_location') == 'chr1:101-1000'
            gene_b = annotations.get_feature_by_id('ENSG00000000002')
            assert (gene_b.start, gene_b.end) == (3001, 3350)
            assert gene_b.feature.get_attr_value('remap_target_status') == 'new'
            gene_c = annotations.get_feature_by_id('ENSG00000000003')
            assert gene_c.feature.get_attr_value('remap_target_status') == 'nonoverlap'
            assert len(gene_c.exons) == 1

    def test_substituted_gene(self, remap_output):
        _, mapped, _ = remap_output
        with AnnotationSet(mapped) as annotations:
            gene_d = annotations.get_feature_by_id('ENSG00000000004')
            assert (gene_d.start, gene_d.end) == (7101, 7600)
            assert gene_d.feature.get_attr_value('remap_target_status') == 'substituted'
            assert gene_d.feature.get_attr_value('remap_substituted_missing_target') == 'ENSG00000000004.1'
            assert annotations.get_feature_by_id('ENSG00000000007') is None

    def test_unmapped_genes(self, remap_output):
        _, _, unmapped = remap_output
        with AnnotationSet(unmapped) as annotations:
            statuses = {g.base_id: g.feature.get_attr_value('remap_status') for g in annotations}
            assert statuses == {
                'ENSG00000000005': 'gene_conflict',
                'ENSG00000000003': 'partial',
                'ENSG00000000004': 'deleted',
                'ENSG00000000007': 'deleted',
                'ENSG00000000006': 'no_seq_map',
            }
            assert all([
                g.feature.get_attr_value('remap_target_status') == 'lost' for g in annotations
            ])


class TestEditThenRemap:
    def test_renamed_chains(self, tmp_path):
        edited = str(tmp_path / 'edited.chain')
        chain_edit.main(
            get_data('unnamed.chain'), get_data('source_names.tsv'), get_data('target_names.tsv'), edited,
            log=DEVNULL)
        mapped = str(tmp_path / 'mapped.gff3')
        unmapped = str(tmp_path / 'unmapped.gff3')
        counts = mapper.main(get_data('source.gff3'), edited, mapped, unmapped, log=DEVNULL)
        assert counts[REMAP_STATUS.FULL_CONTIG] == 1
        assert counts[REMAP_STATUS.NO_SEQ_MAP] == 1
        # without the chr5 chain GENEE only keeps its first transcript
        assert REMAP_STATUS.GENE_CONFLICT not in counts
        assert counts[REMAP_STATUS.GENE_SIZE_CHANGE] == 1
