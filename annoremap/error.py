class GxfFormatError(Exception):
    """
    raised when an annotation record is structurally malformed
    """
    pass


class ParentResolutionError(GxfFormatError):
    """
    raised when a record of a gene references a parent that never appears in the gene's scope
    """
    pass


class SequenceNameError(KeyError):
    """
    raised when a sequence name can not be resolved to a canonical id
    """
    pass


class ChainFormatError(Exception):
    pass


class ChainSizeMismatchError(ChainFormatError):
    """
    raised when the sequence size declared in a chain does not match the size in the sequence table
    """
    pass


class FeatureTreeError(Exception):
    """
    raised on misuse of the feature trees, for example reparenting a node which already has a parent or
    releasing a result twice. Never expected in correct operation
    """
    pass
