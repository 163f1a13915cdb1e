"""
rewrites the sequence names of an alignment chain file to the canonical ids of the source and target assemblies
"""
import copy

from .chain import Chain, parse_chains
from .error import ChainSizeMismatchError
from .file_io import load_sequence_table
from .util import DEVNULL, LOG

MITO_SEQUENCE_ID = 'chrM'
MITO_MISMATCHED_SIZE = 16571
""":class:`int`: length of the UCSC hg19 mitochondrial sequence, which is not the rCRS sequence used elsewhere"""

MITO_SUBSTITUTE_CHAIN = Chain(
    score=16569, t_name=MITO_SEQUENCE_ID, t_size=16569, t_strand='+', t_start=0, t_end=16569,
    q_name=MITO_SEQUENCE_ID, q_size=16569, q_strand='+', q_start=0, q_end=16569,
    chain_id='0', alignment=[(16569,)]
)
""":class:`Chain`: 1-to-1 chain used in place of any chain from the mismatched mitochondrial sequence"""


def is_mismatched_mito_chain(chain, source_id):
    return source_id == MITO_SEQUENCE_ID and chain.t_size == MITO_MISMATCHED_SIZE


def mito_substitute_chain(chain_id, q_name):
    """a new 1-to-1 chain in place of a chain from the mismatched mitochondrial sequence"""
    base = MITO_SUBSTITUTE_CHAIN
    return Chain(
        base.score, base.t_name, base.t_size, base.t_strand, base.t_start, base.t_end,
        q_name, base.q_size, base.q_strand, base.q_start, base.q_end, chain_id, base.alignment)


def _check_size(chain_id, name, chain_size, table_size):
    if chain_size != table_size:
        raise ChainSizeMismatchError(
            'chain {}: size of {} in the chain ({}) does not match the sequence table ({})'.format(
                chain_id, name, chain_size, table_size))


def edit_chain(chain, source_table, target_table):
    """
    Args:
        chain (Chain): the chain to rename
        source_table (SequenceTable): names of the source (reference) assembly
        target_table (SequenceTable): names of the target (query) assembly

    Returns:
        Chain: the renamed chain, or the substitute chain for the mismatched mitochondrial sequence

    Raises:
        SequenceNameError: a sequence name is not in the corresponding table
        ChainSizeMismatchError: a size declared in the chain does not match the table
    """
    source_id = source_table.canonical_id(chain.t_name)
    target_id = target_table.canonical_id(chain.q_name)
    if is_mismatched_mito_chain(chain, source_id):
        substitute = mito_substitute_chain(chain.chain_id, target_id)
        _check_size(chain.chain_id, target_id, substitute.q_size, target_table.lengths[target_id])
        return substitute
    _check_size(chain.chain_id, source_id, chain.t_size, source_table.lengths[source_id])
    _check_size(chain.chain_id, target_id, chain.q_size, target_table.lengths[target_id])
    edited = copy.copy(chain)
    edited.t_name = source_id
    edited.q_name = target_id
    return edited


def edit_chain_file(chains, source_names, target_names, output, log=DEVNULL):
    """
    rename every chain of a chain file and write the result

    Returns:
        int: the number of chains written
    """
    source_table = load_sequence_table(source_names)
    target_table = load_sequence_table(target_names)
    log('loaded {} source and {} target sequences'.format(len(source_table), len(target_table)))
    count = 0
    substituted = 0
    with open(chains, 'r') as fh, open(output, 'w') as out_fh:
        for chain in parse_chains(fh, chains):
            if is_mismatched_mito_chain(chain, source_table.canonical_id(chain.t_name)):
                substituted += 1
            edited = edit_chain(chain, source_table, target_table)
            edited.write(out_fh)
            count += 1
    log('wrote {} chains to {}'.format(count, output))
    if substituted:
        log('substituted {} mitochondrial chain(s)'.format(substituted))
    return count


def main(chains, source_names, target_names, output, log=LOG, **kwargs):
    edit_chain_file(chains, source_names, target_names, output, log=log)
