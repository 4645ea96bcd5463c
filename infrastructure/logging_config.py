"""
Logging configuration for the court booking bot.

Console output plus rotating files for the main log, errors, and a dedicated
scheduler log that follows every booking from scan to notification.
"""

import logging
import logging.handlers
import os
import shutil
from datetime import datetime
from typing import Optional

from tracking import t

from .settings import AppSettings, get_settings

# Loggers that write to the dedicated scheduler log
SCHEDULER_COMPONENTS = (
    'BookingScheduler',
    'SlotFetcher',
    'SlotFetchCoordinator',
    'CourtClient',
    'BookingStore',
    'SlotCatalogStore',
)

APPLICATION_COMPONENTS = SCHEDULER_COMPONENTS + (
    'CourtBot',
    'ErrorHandler',
    'Notifier',
    'LifecycleManager',
    'CommandHandlers',
    'Main',
)


def _reset_directory(path: str) -> None:
    t('infrastructure.logging_config._reset_directory')

    if not os.path.exists(path):
        return
    for filename in os.listdir(path):
        file_path = os.path.join(path, filename)
        try:
            if os.path.isfile(file_path) or os.path.islink(file_path):
                os.unlink(file_path)
            elif os.path.isdir(file_path):
                shutil.rmtree(file_path)
        except OSError as exc:
            print(f'Failed to delete {file_path}. Reason: {exc}')


def setup_logging(settings: Optional[AppSettings] = None, *, clear_previous: bool = True) -> str:
    """
    Set up logging with multiple handlers and detailed formatting.

    Previous logs in ``<log_directory>/latest_log`` are cleared before a new
    session starts. Returns the directory the handlers write to.
    """
    t('infrastructure.logging_config.setup_logging')

    settings = settings or get_settings()
    production_mode = settings.production_mode
    log_dir = os.path.join(settings.log_directory, 'latest_log')

    if clear_previous:
        _reset_directory(log_dir)
    os.makedirs(log_dir, exist_ok=True)

    main_log_file = os.path.join(log_dir, 'bot.log')
    error_log_file = os.path.join(log_dir, 'bot_errors.log')
    scheduler_log_file = os.path.join(log_dir, 'scheduler.log')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO if production_mode else logging.DEBUG)
    root_logger.handlers = []

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d in %(funcName)s()] - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING if production_mode else logging.INFO)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    main_file_handler = logging.handlers.RotatingFileHandler(
        main_log_file,
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    main_file_handler.setLevel(logging.INFO)
    main_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(main_file_handler)

    error_file_handler = logging.handlers.RotatingFileHandler(
        error_log_file,
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    error_file_handler.setLevel(logging.ERROR)
    error_file_handler.setFormatter(detailed_formatter)
    root_logger.addHandler(error_file_handler)

    scheduler_handler = logging.handlers.RotatingFileHandler(
        scheduler_log_file,
        maxBytes=20*1024*1024,  # 20MB
        backupCount=5,
        encoding='utf-8'
    )
    scheduler_handler.setLevel(logging.INFO if production_mode else logging.DEBUG)
    scheduler_handler.setFormatter(detailed_formatter)

    for name in SCHEDULER_COMPONENTS:
        component_logger = logging.getLogger(name)
        if scheduler_handler not in component_logger.handlers:
            component_logger.addHandler(scheduler_handler)

    component_level = logging.INFO if production_mode else logging.DEBUG
    for name in APPLICATION_COMPONENTS:
        logging.getLogger(name).setLevel(component_level)

    # Reduce noise from external libraries
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('telegram').setLevel(logging.INFO)

    root_logger.info("="*80)
    root_logger.info(f"Court bot logging initialized - {datetime.now()}")
    root_logger.info(f"Production Mode: {'ON' if production_mode else 'OFF'}")
    root_logger.info(f"Main log: {main_log_file}")
    root_logger.info(f"Error log: {error_log_file}")
    root_logger.info(f"Scheduler log: {scheduler_log_file}")
    root_logger.info("="*80)
    return log_dir


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    t('infrastructure.logging_config.get_logger')
    return logging.getLogger(name)
