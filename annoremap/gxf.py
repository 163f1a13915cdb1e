"""
module for reading and writing GFF3 and GTF (GXF) gene annotation records

Only the parts of the formats needed to rebuild gene trees and to write remapped features are supported. Records are
handed out one at a time by :class:`GxfParser`, which allows records to be pushed back so that the gene tree builder
can stop at the start of the next gene.
"""
import copy
import gzip
import re
from urllib.parse import quote, unquote

from .constants import FEATURE_TYPE, GXF_FORMAT, SOURCE, STRAND
from .error import GxfFormatError
from .interval import Interval

GFF3_ESCAPE_SAFE = ' :/()[]{}+-_.|^@!~*\'"<>?$#'
GTF_ATTR_REGEX = re.compile(r'\s*([^\s;]+)\s+("[^"]*"|[^;"]*?)\s*;')
PAR_Y_SUFFIX_REGEX = re.compile(r'_PAR_Y$')
VERSION_SUFFIX_REGEX = re.compile(r'\.\d+$')


class GxfAttr:
    """
    a named attribute with one or more values
    """
    def __init__(self, name, vals):
        self.name = name
        self.vals = list(vals) if isinstance(vals, (list, tuple)) else [vals]

    @property
    def val(self):
        """the first (usually only) value"""
        return self.vals[0]

    def __repr__(self):
        return 'GxfAttr({}={})'.format(self.name, ','.join(self.vals))


class GxfMetaRecord:
    """
    comment or directive line, carried through unparsed
    """
    def __init__(self, line):
        self.line = line

    def __repr__(self):
        return 'GxfMetaRecord({})'.format(repr(self.line))


class GxfFeature:
    """
    a single annotation record

    Coordinates are 1-based and inclusive as they are in the files
    """

    def __init__(self, seqid, source, type, start, end, score='.', strand=STRAND.NS, phase='.', attrs=None):
        self.seqid = seqid
        self.source = source
        self.type = type
        self.start = int(start)
        self.end = int(end)
        self.score = score
        self.strand = strand
        self.phase = phase
        self.attrs = [] if attrs is None else list(attrs)
        if self.start > self.end:
            raise GxfFormatError('feature start > end', seqid, start, end)
        if strand not in STRAND.values():
            raise GxfFormatError('invalid strand', strand)

    def get_attr(self, name):
        for attr in self.attrs:
            if attr.name == name:
                return attr
        return None

    def get_attr_value(self, name, default=None):
        attr = self.get_attr(name)
        return default if attr is None else attr.val

    def has_attr(self, name):
        return self.get_attr(name) is not None

    def set_attr(self, name, value):
        """replace the value(s) of an attribute, adding it at the end when it does not exist"""
        attr = self.get_attr(name)
        if attr is None:
            self.attrs.append(GxfAttr(name, str(value)))
        else:
            attr.vals = [str(value)]

    def remove_attr(self, name):
        self.attrs = [a for a in self.attrs if a.name != name]

    def _get_attr_by_type(self, gene_attr, transcript_attr, exon_attr=None):
        if self.type == FEATURE_TYPE.GENE:
            return self.get_attr_value(gene_attr, '')
        elif self.type == FEATURE_TYPE.TRANSCRIPT:
            return self.get_attr_value(transcript_attr, '')
        elif self.type == FEATURE_TYPE.EXON and exon_attr:
            return self.get_attr_value(exon_attr, '')
        return ''

    @property
    def id(self):
        """GFF3 ID attribute, falling back to the type specific id"""
        return self.get_attr_value('ID') or self.type_id

    @property
    def parent_ids(self):
        attr = self.get_attr('Parent')
        return [] if attr is None else attr.vals

    @property
    def type_id(self):
        """the id based on the feature type (``gene_id``, ``transcript_id`` or ``exon_id``), empty if none"""
        type_id = self._get_attr_by_type('gene_id', 'transcript_id', 'exon_id')
        if not type_id and self.type in {FEATURE_TYPE.GENE, FEATURE_TYPE.TRANSCRIPT}:
            type_id = self.get_attr_value('ID', '')
        return type_id

    @property
    def havana_type_id(self):
        return self._get_attr_by_type('havana_gene', 'havana_transcript')

    @property
    def type_name(self):
        return self._get_attr_by_type('gene_name', 'transcript_name')

    @property
    def type_biotype(self):
        return self._get_attr_by_type('gene_type', 'transcript_type') or \
            self._get_attr_by_type('gene_biotype', 'transcript_biotype')

    @property
    def is_automatic(self):
        return self.source == SOURCE.ENSEMBL

    @property
    def location(self):
        return Interval(self.start, self.end)

    def location_str(self):
        """
        Example:
            >>> GxfFeature('chr1', 'HAVANA', 'gene', 11, 20, strand='+').location_str()
            'chr1:11-20'
        """
        return '{}:{}-{}'.format(self.seqid, self.start, self.end)

    def copy(self, **kwargs):
        """
        independent copy of this feature, optionally replacing some fields
        """
        new_feature = copy.copy(self)
        new_feature.attrs = [GxfAttr(a.name, list(a.vals)) for a in self.attrs]
        for field, value in kwargs.items():
            if not hasattr(new_feature, field):
                raise AttributeError('not a feature field', field)
            setattr(new_feature, field, value)
        return new_feature

    def to_line(self, gxf_format):
        if gxf_format == GXF_FORMAT.GFF3:
            attrs = format_gff3_attrs(self.attrs)
        else:
            attrs = format_gtf_attrs(self.attrs)
        return '\t'.join([
            self.seqid, self.source, self.type, str(self.start), str(self.end), self.score, self.strand, self.phase,
            attrs
        ])

    def __repr__(self):
        return 'GxfFeature({}, {}:{}-{}{}, id={})'.format(
            self.type, self.seqid, self.start, self.end, self.strand, self.id)


def get_base_id(feature_id):
    """
    the id without its version and pseudoautosomal copy suffix

    Example:
        >>> get_base_id('ENSG00000182378.14_PAR_Y')
        'ENSG00000182378'
    """
    return VERSION_SUFFIX_REGEX.sub('', PAR_Y_SUFFIX_REGEX.sub('', feature_id))


def parse_gff3_attrs(text):
    """
    Example:
        >>> parse_gff3_attrs('ID=gene1;tag=basic,CCDS')
        [GxfAttr(ID=gene1), GxfAttr(tag=basic,CCDS)]
    """
    attrs = []
    for part in text.strip().split(';'):
        part = part.strip()
        if not part:
            continue
        if '=' not in part:
            raise GxfFormatError('GFF3 attribute missing "="', part)
        name, value = part.split('=', 1)
        attrs.append(GxfAttr(unquote(name), [unquote(v) for v in value.split(',')]))
    return attrs


def format_gff3_attrs(attrs):
    return ';'.join([
        '{}={}'.format(quote(a.name, safe=GFF3_ESCAPE_SAFE), ','.join([quote(v, safe=GFF3_ESCAPE_SAFE) for v in a.vals]))
        for a in attrs
    ])


def parse_gtf_attrs(text):
    """
    repeated names (ex. ``tag``) are collected into a single multi-valued attribute

    Example:
        >>> parse_gtf_attrs('gene_id "G1"; level 2; tag "basic"; tag "CCDS";')
        [GxfAttr(gene_id=G1), GxfAttr(level=2), GxfAttr(tag=basic,CCDS)]
    """
    attrs = []
    by_name = {}
    text = text.strip()
    if text and not text.endswith(';'):
        text += ';'
    pos = 0
    for match in GTF_ATTR_REGEX.finditer(text):
        if text[pos:match.start()].strip():
            raise GxfFormatError('unparsable GTF attributes', text)
        pos = match.end()
        name, value = match.group(1), match.group(2)
        if value.startswith('"'):
            value = value[1:-1]
        if name in by_name:
            by_name[name].vals.append(value)
        else:
            by_name[name] = GxfAttr(name, value)
            attrs.append(by_name[name])
    if text[pos:].strip():
        raise GxfFormatError('unparsable GTF attributes', text)
    return attrs


def format_gtf_attrs(attrs):
    parts = []
    for attr in attrs:
        for val in attr.vals:
            if val.isdigit():
                parts.append('{} {};'.format(attr.name, val))
            else:
                parts.append('{} "{}";'.format(attr.name, val))
    return ' '.join(parts)


def guess_format(filename):
    """
    Example:
        >>> guess_format('gencode.v19.annotation.gtf.gz')
        'gtf'
    """
    name = re.sub(r'\.gz$', '', filename)
    if name.endswith('.gtf'):
        return GXF_FORMAT.GTF
    elif name.endswith('.gff3') or name.endswith('.gff'):
        return GXF_FORMAT.GFF3
    raise ValueError('can not determine the annotation format from the file name', filename)


def parse_feature_line(line, gxf_format):
    cols = line.rstrip('\n').split('\t')
    if len(cols) != 9:
        raise GxfFormatError('expected 9 tab-separated columns, found {}'.format(len(cols)), line)
    try:
        start, end = int(cols[3]), int(cols[4])
    except ValueError:
        raise GxfFormatError('invalid feature coordinates', cols[3], cols[4])
    if gxf_format == GXF_FORMAT.GFF3:
        attrs = parse_gff3_attrs(cols[8])
    else:
        attrs = parse_gtf_attrs(cols[8])
    return GxfFeature(cols[0], cols[1], cols[2], start, end, cols[5], cols[6], cols[7], attrs)


def open_gxf(filename, mode='r'):
    if filename.endswith('.gz'):
        return gzip.open(filename, mode + 't')
    return open(filename, mode)


class GxfParser:
    """
    pull reader for annotation records with push-back
    """

    def __init__(self, filename, gxf_format=None, fh=None):
        self.filename = filename
        self.gxf_format = gxf_format if gxf_format else guess_format(filename)
        GXF_FORMAT.enforce(self.gxf_format)
        self._fh = open_gxf(filename) if fh is None else fh
        self._pending = []
        self.line_number = 0

    def read(self):
        """
        the next record, or None at the end of the input

        Raises:
            GxfFormatError: the line is not a valid record
        """
        if self._pending:
            return self._pending.pop()
        for line in self._fh:
            self.line_number += 1
            if not line.strip():
                continue
            if line.startswith('#'):
                return GxfMetaRecord(line.rstrip('\n'))
            try:
                return parse_feature_line(line, self.gxf_format)
            except GxfFormatError as err:
                raise GxfFormatError('{}:{}: {}'.format(self.filename, self.line_number, err))
        return None

    def push(self, record):
        """return a record so that it is handed out again by the next read"""
        self._pending.append(record)

    def __iter__(self):
        while True:
            record = self.read()
            if record is None:
                return
            yield record

    def close(self):
        self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()


class GxfWriter:
    """
    writes features and meta lines to one output stream

    A sequence-region header is written immediately before the first feature on every sequence, once per stream
    """

    def __init__(self, filename, gxf_format=None, sequence_sizes=None, fh=None):
        self.filename = filename
        self.gxf_format = gxf_format if gxf_format else guess_format(filename)
        GXF_FORMAT.enforce(self.gxf_format)
        self.sequence_sizes = {} if sequence_sizes is None else sequence_sizes
        self.seq_regions_written = set()
        self._fh = open_gxf(filename, 'w') if fh is None else fh
        if self.gxf_format == GXF_FORMAT.GFF3:
            self.write_meta('##gff-version 3')

    def write_meta(self, line):
        self._fh.write(line + '\n')

    def write_sequence_region(self, seqid):
        """
        write the sequence-region header for a sequence unless it has already been written to this stream

        Returns:
            bool: True if the header was written
        """
        if seqid in self.seq_regions_written:
            return False
        self.seq_regions_written.add(seqid)
        size = self.sequence_sizes.get(seqid)
        if size is None:
            self.write_meta('##sequence-region {}'.format(seqid))
        else:
            self.write_meta('##sequence-region {} 1 {}'.format(seqid, size))
        return True

    def write_feature(self, feature):
        self.write_sequence_region(feature.seqid)
        self._fh.write(feature.to_line(self.gxf_format) + '\n')

    def close(self):
        self._fh.close()

    def __enter__(self):
        return self

    def __exit__(self, *pos):
        self.close()
