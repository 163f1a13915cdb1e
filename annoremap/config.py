import argparse

from . import __version__
from .constants import cast_boolean, float_fraction
from .mapper import DEFAULTS as REMAP_DEFAULTS, TARGET_DEFAULTS
from .util import filepath


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    For a given argument type, returns the string to be used for the metavar argument in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type in [float_fraction, float]:
        return 'FLOAT'
    elif arg_type == int:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    return None


def augment_parser(arguments, parser, required=None):
    """
    Add the named arguments to a parser or argument group. Documented settings take their type, default and help
    text from the namespaces of default values

    Args:
        arguments (:class:`list` of :class:`str`): names of the arguments to add
        parser (argparse.ArgumentParser): the parser or argument group to add the arguments to
        required (bool): make the arguments required
    """
    for arg in arguments:
        if arg == 'help':
            parser.add_argument('-h', '--help', action='help', help='show this help message and exit')
        elif arg == 'version':
            parser.add_argument(
                '-v', '--version', action='version', version='%(prog)s version ' + __version__,
                help='Outputs the version number')
        elif arg == 'log':
            parser.add_argument('--log', help='redirect stdout to a log file', default=None)
        elif arg == 'log_level':
            parser.add_argument(
                '--log_level', help='level of logging to output', choices=['INFO', 'DEBUG'], default='INFO')
        elif arg in REMAP_DEFAULTS or arg in TARGET_DEFAULTS:
            namespace = REMAP_DEFAULTS if arg in REMAP_DEFAULTS else TARGET_DEFAULTS
            cast_type = namespace.type(arg)
            parser.add_argument(
                '--{}'.format(arg), default=namespace[arg], required=bool(required), type=cast_type,
                help=namespace.define(arg), metavar=get_metavar(cast_type))
        else:
            raise KeyError('invalid argument', arg)
