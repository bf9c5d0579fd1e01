from __future__ import annotations

import os
import sys
from typing import List, Optional

from modloader.core.arguments import ArgumentHelper
from modloader.core.config.manager import ConfigManager
from modloader.core.config.paths import ConfigFsPaths
from modloader.core.console import ModConsole
from modloader.core.constants import CONSOLE_PORT_ARGUMENT
from modloader.core.errors import ConfigError, HostNotFoundError
from modloader.core.loader_app import LoaderApp
from modloader.core.logger import setup_logging
from modloader.core.ops_log import OpsLogger
from modloader.core.run.reporting import to_human

ROOT_ENV = "MODLOADER_ROOT"


def main(argv: Optional[List[str]] = None) -> int:
    """
    Every argument is forwarded to the game untouched, except consolePort,
    which is consumed by the loader (socket console + detach after launch).
    """
    arguments = list(sys.argv[1:] if argv is None else argv)
    root = os.path.abspath(os.environ.get(ROOT_ENV) or os.getcwd())
    fs = ConfigFsPaths(root)

    cm = ConfigManager(fs=fs)
    try:
        cfg = cm.load()
    except ConfigError as e:
        logger = setup_logging(os.path.join(fs.logs_dir, "loader.log"))
        logger.error(f"Configuration error: {e}")
        return 2

    args = ArgumentHelper(arguments)
    logger = setup_logging(
        cfg.resolve(root, cfg.log_file),
        output_file=cfg.resolve(root, cfg.output_file),
        verbose=cfg.verbose,
        console_port=args.get_int_argument(CONSOLE_PORT_ARGUMENT),
    )
    cm.logger = logger

    app = LoaderApp(
        config_manager=cm,
        console=ModConsole(logger),
        loader_root=root,
        ops=OpsLogger(path=fs.ops_log),
    )
    try:
        report = app.run(arguments)
    except HostNotFoundError:
        return 1
    logger.debug(to_human(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())
