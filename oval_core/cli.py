import sys
import logging
from pathlib import Path

import yaml

from . import __version__


def _default_config_path():
    # when frozen by PyInstaller, sys._MEIPASS points to bundle root
    if getattr(sys, "frozen", False):
        base = Path(getattr(sys, "_MEIPASS", Path.cwd()))
        return base / "config.yaml"
    # source mode: config lives next to this file
    return Path(__file__).parent / "config.yaml"


def _load_config(config_path):
    from .logic.models import OvalConfig

    if not config_path:
        default_config = _default_config_path()
        if default_config.exists():
            config_path = str(default_config)

    if not config_path:
        return OvalConfig()
    return OvalConfig.from_file(config_path)


def build_registry():
    from .application import CommandRegistry, register_oval_commands

    registry = CommandRegistry()
    register_oval_commands(registry)
    return registry


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)

    # Fast path for version
    if "--version" in argv:
        print(__version__)
        return 0

    # Lazy import to avoid pulling the whole stack on --version
    from .application import CommandContext, ExitStatus
    from .infrastructure.logging import enhanced_logger
    from .infrastructure.shared.error_handling import OvalError

    parser = build_registry().build_parser(prog="oval-core", description="OVAL evaluation core")
    args = parser.parse_args(argv)

    try:
        config = _load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return int(ExitStatus.ERROR)

    if args.quiet:
        verbosity = -1
    elif args.verbose:
        verbosity = 1
    else:
        verbosity = config.evaluation.verbosity

    enhanced_logger.setup_logging(verbose=verbosity > 0, log_file=config.logging.log_file,
                                  level=config.logging.level)
    logger = logging.getLogger("cli")
    logger.info(f"oval-core {__version__}: {args.command.name}")

    context = CommandContext(config=config, verbosity=verbosity)
    status = ExitStatus.ERROR
    try:
        status = args.command.handler(args, context)
    except OvalError as e:
        for line in e.diagnostic_lines():
            print(line, file=context.err)
        enhanced_logger.log_error_details(e, args.command.name)
    finally:
        enhanced_logger.finalize_logging(success=status == ExitStatus.OK)
        enhanced_logger.cleanup()

    return int(status)


if __name__ == "__main__":
    sys.exit(main())
