#!python
import argparse
import logging
import platform
import sys
import time

from . import __version__
from . import chain_edit as _chain_edit
from . import config as _config
from .constants import EXIT_OK, PROGNAME, SUBCOMMAND, AnnoremapNamespace
from . import mapper as _mapper
from . import util as _util


def main(argv=None):
    """
    sets up the parser and checks the validity of command line arguments. Runs the requested sub-command

    Args:
        argv (list): List of arguments, defaults to command line arguments
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())

    parser = argparse.ArgumentParser(formatter_class=_config.CustomHelpFormatter)
    _config.augment_parser(['version'], parser)
    subp = parser.add_subparsers(dest='command', help='specifies which sub-program to use')
    subp.required = True
    required = {}  # hold required argument group by subparser command name
    optional = {}  # hold optional argument group by subparser command name
    for command in SUBCOMMAND.values():
        subparser = subp.add_parser(command, formatter_class=_config.CustomHelpFormatter, add_help=False)
        required[command] = subparser.add_argument_group('required arguments')
        optional[command] = subparser.add_argument_group('optional arguments')
        _config.augment_parser(['help', 'version', 'log', 'log_level'], optional[command])

    # remap
    required[SUBCOMMAND.REMAP].add_argument(
        '--annotations', required=True, type=_util.filepath, metavar='FILEPATH',
        help='GFF3 or GTF annotation of the source assembly')
    required[SUBCOMMAND.REMAP].add_argument(
        '--chains', required=True, type=_util.filepath, metavar='FILEPATH',
        help='alignment chains from the source to the target assembly')
    required[SUBCOMMAND.REMAP].add_argument(
        '--mapped', required=True, metavar='FILEPATH', help='path to the output of the mapped genes')
    required[SUBCOMMAND.REMAP].add_argument(
        '--unmapped', required=True, metavar='FILEPATH',
        help='path to the output of the genes and features which could not be mapped')
    _config.augment_parser(_mapper.TARGET_DEFAULTS.keys(), optional[SUBCOMMAND.REMAP])
    _config.augment_parser(_mapper.DEFAULTS.keys(), optional[SUBCOMMAND.REMAP])

    # edit_chain
    required[SUBCOMMAND.EDIT_CHAIN].add_argument(
        '--chains', required=True, type=_util.filepath, metavar='FILEPATH', help='the alignment chains to rename')
    required[SUBCOMMAND.EDIT_CHAIN].add_argument(
        '--source_names', required=True, type=_util.filepath, metavar='FILEPATH',
        help='sequence names table of the source (reference) assembly')
    required[SUBCOMMAND.EDIT_CHAIN].add_argument(
        '--target_names', required=True, type=_util.filepath, metavar='FILEPATH',
        help='sequence names table of the target (query) assembly')
    required[SUBCOMMAND.EDIT_CHAIN].add_argument(
        '-o', '--output', required=True, metavar='FILEPATH', help='path to the renamed chains')

    args = AnnoremapNamespace(**parser.parse_args(argv).__dict__)

    log_conf = {'format': '{message}', 'style': '{', 'level': args.log_level}

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers:
        logging.root.removeHandler(handler)
    if args.log:  # redirect stdout AND stderr to a log file
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.LOG('{}: {}'.format(PROGNAME, __version__))
    _util.LOG('hostname:', platform.node(), time_stamp=False)
    _util.log_arguments(args)

    ret_val = EXIT_OK
    command = args.command
    log_to_file = args.get('log', None)

    # discard any arguments needed for redirect/setup only
    for init_arg in ['command', 'log', 'log_level']:
        args.discard(init_arg)

    try:
        if command == SUBCOMMAND.REMAP:
            _mapper.main(**args.to_dict(), log=_util.LOG)
        else:
            _chain_edit.main(**args.to_dict(), log=_util.LOG)

        duration = int(time.time()) - start_time
        _util.LOG('run time (s): {}'.format(duration), time_stamp=False)
        return ret_val
    except Exception as err:
        if log_to_file:
            logging.exception(err)  # capture the error in the logging output file
        raise err
    finally:
        for handler in logging.root.handlers:
            logging.root.removeHandler(handler)
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)


if __name__ == '__main__':
    main()
