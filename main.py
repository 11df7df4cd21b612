"""
SIS Watch
Main entry point - watch a folder for new SIS images and preprocess them
"""
import argparse
import signal
import sys

from app_config import APP_DISPLAY_NAME, APP_DESCRIPTION
from logging_config import setup_logging
from services.config import Config
from services.dispatcher import Dispatcher
from services.errors import SisWatchError
from services.logger import app_logger
from services.processing import create_processor_from_config, get_available_processors
from services.watcher import FileWatcher


def build_parser():
    parser = argparse.ArgumentParser(
        description=f'{APP_DISPLAY_NAME} - {APP_DESCRIPTION}',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  python main.py --inpath /data/raw --outpath /data/cam      # Copy files through
  python main.py --inpath /data/raw --outpath /data/cam --proc fkspecies -v
  python main.py --config lab.json -vv                       # Settings from file, debug output
        """)
    
    parser.add_argument('--inpath', help='Input directory to watch (recursively)')
    parser.add_argument('--outpath', help='Output directory for processed files')
    parser.add_argument('--proc', help=f'Processor name ({", ".join(get_available_processors())})')
    parser.add_argument('--config', metavar='FILE',
                        help='JSON config file (default: config.json in the app data folder)')
    parser.add_argument('-v', '--verbose', action='count', default=None,
                        help='Verbosity (-v for info level, -vv for debug)')
    parser.add_argument('-q', '--quiet', action='store_true', default=None,
                        help='Quiet output (overrides -v)')
    parser.add_argument('--list-processors', action='store_true',
                        help='Print the available processors and exit')
    return parser


def load_config(args):
    """Config file values with any command line values layered on top"""
    config = Config(args.config)
    config.apply_overrides({
        'inpath': args.inpath,
        'outpath': args.outpath,
        'proc': args.proc,
        'verbose': args.verbose,
        'quiet': args.quiet,
    })
    return config


def main(argv=None):
    """
    Run the watcher until stopped.
    
    Returns:
        Process exit status, 0 on a clean stop and 1 on any error
    """
    args = build_parser().parse_args(argv)
    
    if args.list_processors:
        for name in get_available_processors():
            print(name)
        return 0
    
    try:
        config = load_config(args)
    except SisWatchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    
    quiet = bool(config.get('quiet'))
    setup_logging(verbose=config.get('verbose', 0), quiet=quiet)
    
    try:
        config.check_paths()
        processor = create_processor_from_config(config)
        app_logger.warning(f"Chosen processor: {processor.name}")
        
        watcher = FileWatcher(debounce_ms=config.get('debounce_ms'))
        dispatcher = Dispatcher(processor, watcher, config.get('inpath'),
                                recursive=config.get('recursive', True))
        
        def _signal_handler(signum, frame):
            app_logger.info(f"Received signal {signum}, stopping...")
            dispatcher.stop()
        
        signal.signal(signal.SIGINT, _signal_handler)
        signal.signal(signal.SIGTERM, _signal_handler)
        
        if not quiet:
            print(f"Watching path: {config.get('inpath')}")
        
        dispatcher.run()
        
    except SisWatchError as e:
        app_logger.error(str(e))
        if quiet:
            print(f"Error: {e}", file=sys.stderr)
        return 1
    
    return 0


def run():
    """Console script entry point"""
    sys.exit(main())


if __name__ == "__main__":
    run()
