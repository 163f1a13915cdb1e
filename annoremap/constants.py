"""
module responsible for the controlled vocabularies and small constants used throughout the annoremap package
"""
import argparse
import os


PROGNAME = 'annoremap'
EXIT_OK = 0


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


class AnnoremapNamespace:
    """
    Namespace to hold module constants and documented, typed settings

    Example:
        >>> nspace = AnnoremapNamespace(thing=1, otherthing=2)
        >>> nspace.thing
        1
        >>> nspace.otherthing
        2
    """
    def __init__(self, *pos, **kwargs):
        object.__setattr__(self, '_defns', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_nullable', set())
        object.__setattr__(self, '_env_overwritable', set())
        object.__setattr__(self, '_env_prefix', 'ANNOREMAP')

        for k in pos:
            if k in self._members:
                raise AttributeError('Cannot respecify existing attribute', k, self._members[k])
            self[k] = k

        for attr, val in kwargs.items():
            if attr in self._members:
                raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
            self[attr] = val

        for attr, value in self._members.items():
            self._set_type(attr, type(value))

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__, ', '.join(sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()])))

    def discard(self, attr):
        """
        Remove a variable if it exists
        """
        self._members.pop(attr, None)
        self._nullable.discard(attr)
        self._defns.pop(attr, None)
        self._types.pop(attr, None)
        self._env_overwritable.discard(attr)

    def get_env_name(self, attr):
        """
        Example:
            >>> nspace = AnnoremapNamespace(a=1)
            >>> nspace.get_env_name('a')
            'ANNOREMAP_A'
        """
        if self._env_prefix:
            return '{}_{}'.format(self._env_prefix, attr).upper()
        return attr.upper()

    def get_env_var(self, attr):
        """
        retrieve the environment variable definition of a given attribute
        """
        env = os.environ[self.get_env_name(attr)].strip()
        attr_type = self._types.get(attr, str)

        if attr in self._nullable and env.lower() == 'none':
            return None
        return attr_type(env)

    def is_env_overwritable(self, attr):
        return attr in self._env_overwritable

    def __getattribute__(self, attr):
        try:
            return object.__getattribute__(self, attr)
        except AttributeError as err:
            variables = object.__getattribute__(self, '_members')
            if attr not in variables:
                raise err
            if self.is_env_overwritable(attr):
                try:
                    return self.get_env_var(attr)
                except KeyError:
                    pass
            return variables[attr]

    def items(self):
        return [(k, self[k]) for k in self.keys()]

    def to_dict(self):
        return dict(self.items())

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, val):
        self.__setattr__(key, val)

    def __setattr__(self, attr, val):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        object.__getattribute__(self, '_members')[attr] = val

    def get(self, key, *pos):
        """
        get an attribute, return a default (if given) if the attribute does not exist
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. get takes a single \'default\' value argument')
        try:
            return self[key]
        except AttributeError as err:
            if pos:
                return pos[0]
            raise err

    def keys(self):
        return [k for k in self._members]

    def values(self):
        return [self[k] for k in self._members]

    def enforce(self, value):
        """
        checks that the current namespace has a given value

        Raises:
            KeyError: the value did not exist

        Example:
            >>> REMAP_STATUS.enforce('partial')
            'partial'
        """
        if value not in self.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), self.values())
        return value

    def __iter__(self):
        return iter(self.keys())

    def _set_type(self, attr, cast_type):
        if cast_type == bool:
            self._types[attr] = cast_boolean
        else:
            self._types[attr] = cast_type

    def type(self, attr, *pos):
        try:
            return self._types[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def define(self, attr, *pos):
        """
        Get the definition of a given attribute or return a default (when given) if the attribute does not exist

        Raises:
            KeyError: the attribute does not exist and a default was not given
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. define takes a single \'default\' value argument')
        try:
            return self._defns[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def add(self, attr, value, defn=None, cast_type=None, nullable=False, env_overwritable=False):
        """
        Add an attribute to the name space

        Args:
            attr (str): name of the attribute being added
            value: the value of the attribute
            defn (str): the definition, will be used in generating the help menus
            cast_type (callable): the function to use in casting the value
            nullable (bool): True if this attribute can have a None value
            env_overwritable (bool): True if this attribute will be overriden by its environment variable equivalent
        """
        if cast_type:
            self._set_type(attr, cast_type)
        else:
            self._set_type(attr, type(value))
        if defn:
            self._defns[attr] = defn

        if nullable:
            self._nullable.add(attr)
        if env_overwritable:
            self._env_overwritable.add(attr)
        self[attr] = value


def float_fraction(num):
    """
    cast input to a float

    Raises:
        argparse.ArgumentTypeError: if the input cannot be cast to a float or the number is not between 0 and 1
    """
    try:
        num = float(num)
    except ValueError:
        raise argparse.ArgumentTypeError('Must be a value between 0 and 1')
    if num < 0 or num > 1:
        raise argparse.ArgumentTypeError('Must be a value between 0 and 1')
    return num


SUBCOMMAND = AnnoremapNamespace(REMAP='remap', EDIT_CHAIN='edit_chain')
""":class:`AnnoremapNamespace`: holds controlled vocabulary for the command line sub-programs"""

STRAND = AnnoremapNamespace(POS='+', NEG='-', NS='.')
""":class:`AnnoremapNamespace`: holds controlled vocabulary for allowed strand values

- ``POS``: the positive/forward strand
- ``NEG``: the negative/reverse strand
- ``NS``: strand is not specified
"""


def reverse_strand(strand):
    """
    Example:
        >>> reverse_strand('+')
        '-'
    """
    if strand == STRAND.POS:
        return STRAND.NEG
    elif strand == STRAND.NEG:
        return STRAND.POS
    return strand


GXF_FORMAT = AnnoremapNamespace(GFF3='gff3', GTF='gtf')
""":class:`AnnoremapNamespace`: the supported annotation file formats"""

FEATURE_TYPE = AnnoremapNamespace(
    GENE='gene',
    TRANSCRIPT='transcript',
    EXON='exon',
    CDS='CDS',
    START_CODON='start_codon',
    STOP_CODON='stop_codon',
    UTR='UTR',
    FIVE_PRIME_UTR='five_prime_UTR',
    THREE_PRIME_UTR='three_prime_UTR',
    SELENOCYSTEINE='Selenocysteine',
)
""":class:`AnnoremapNamespace`: feature types with special handling. Other types are carried as leaves"""

SOURCE = AnnoremapNamespace(ENSEMBL='ENSEMBL', HAVANA='HAVANA')
""":class:`AnnoremapNamespace`: annotation sources. ``ENSEMBL`` marks automatic annotation"""

REMAP_STATUS = AnnoremapNamespace(
    NONE='none',
    FULL_CONTIG='full_contig',
    FULL_FRAGMENT='full_fragment',
    PARTIAL='partial',
    DELETED='deleted',
    NO_SEQ_MAP='no_seq_map',
    GENE_CONFLICT='gene_conflict',
    GENE_SIZE_CHANGE='gene_size_change',
)
""":class:`AnnoremapNamespace`: outcome of projecting a feature to the target assembly. Members are declared
from least to most severe

- ``NONE``: not yet classified
- ``FULL_CONTIG``: mapped whole, from a single alignment block
- ``FULL_FRAGMENT``: mapped whole, stitched from several alignment blocks
- ``PARTIAL``: part of the feature mapped, or it was split across target loci
- ``DELETED``: nothing mapped
- ``NO_SEQ_MAP``: the source sequence is not covered by the alignment chains
- ``GENE_CONFLICT``: the transcripts of a gene mapped to incompatible loci
- ``GENE_SIZE_CHANGE``: the mapped gene extent changed beyond tolerance
"""

MAPPED_REMAP_STATUSES = {REMAP_STATUS.FULL_CONTIG, REMAP_STATUS.FULL_FRAGMENT, REMAP_STATUS.PARTIAL}
UNMAPPED_REMAP_STATUSES = {REMAP_STATUS.DELETED, REMAP_STATUS.NO_SEQ_MAP}
UNUSABLE_REMAP_STATUSES = {
    REMAP_STATUS.DELETED, REMAP_STATUS.NO_SEQ_MAP, REMAP_STATUS.GENE_CONFLICT, REMAP_STATUS.GENE_SIZE_CHANGE
}


def remap_status_severity(status):
    """
    Example:
        >>> remap_status_severity(REMAP_STATUS.PARTIAL) > remap_status_severity(REMAP_STATUS.FULL_CONTIG)
        True
    """
    return REMAP_STATUS.values().index(REMAP_STATUS.enforce(status))


def most_severe_remap_status(*statuses):
    """
    the most severe of the input statuses, NONE when there are no inputs
    """
    if not statuses:
        return REMAP_STATUS.NONE
    return max(statuses, key=remap_status_severity)


TARGET_STATUS = AnnoremapNamespace(
    NA='na',
    NEW='new',
    OK='ok',
    NONOVERLAP='nonoverlap',
    LOST='lost',
    SUBSTITUTED='substituted',
)
""":class:`AnnoremapNamespace`: where the content of a feature comes from relative to the target annotation

- ``NA``: not compared to a target annotation
- ``NEW``: mapped and no feature with the same id exists in the target annotation
- ``OK``: mapped and overlaps the target feature with the same id
- ``NONOVERLAP``: mapped and the target feature with the same id is elsewhere
- ``LOST``: could not be mapped
- ``SUBSTITUTED``: copied from the target annotation in place of a lost source gene
"""

SMALL_NON_CODING_BIOTYPES = frozenset([
    'miRNA', 'misc_RNA', 'rRNA', 'scaRNA', 'snRNA', 'snoRNA', 'sRNA', 'scRNA', 'vaultRNA', 'Y_RNA', 'ribozyme',
])

REMAP_STATUS_ATTR = 'remap_status'
REMAP_ORIGINAL_LOCATION_ATTR = 'remap_original_location'
REMAP_NUM_MAPPINGS_ATTR = 'remap_num_mappings'
REMAP_TARGET_STATUS_ATTR = 'remap_target_status'
REMAP_SUBSTITUTED_MISSING_TARGET_ATTR = 'remap_substituted_missing_target'
