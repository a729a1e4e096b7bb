"""Logging setup for admin runs of the gameweek engine."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    command: Optional[str] = None,
    log_to_file: bool = True,
    console_level: Optional[int] = logging.WARNING,
) -> logging.Logger:
    """
    Configure the 'fsl' logger for one admin run.

    Every record at ``level`` goes to a timestamped file, so each finalize or
    import leaves an audit trail. The console (stderr) only shows records at
    ``console_level`` and above, keeping stdout free for command output.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Level written to the log file (default: INFO)
        command: Name of the admin command, used in the log file name
        log_to_file: Whether to write a log file (default: True)
        console_level: Console threshold; None disables console output

    Returns:
        The configured 'fsl' logger

    Example:
        from fsl.logging_config import setup_logging
        logger = setup_logging(command='finalize')
        logger.info('Finalizing gameweek 3')
    """
    logger = logging.getLogger('fsl')
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_to_file:
        log_dir = Path(log_dir) if log_dir is not None else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        name = f'fsl_{command}_{stamp}.log' if command else f'fsl_{stamp}.log'
        file_handler = logging.FileHandler(log_dir / name, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if console_level is not None:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger
