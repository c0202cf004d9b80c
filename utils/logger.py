import logging
import os
from functools import wraps
import colorlog

DEFAULT_LOG_DIR = './logs'


def setup_logger(name, log_dir=None, level=logging.INFO):
    """
    Creates and returns a logger with both color console and file output.
    The log directory comes from LOG_DIR when not given explicitly.
    """
    log_dir = log_dir or os.getenv('LOG_DIR', DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, f'{name}.log')

    # colored console logs
    color_formatter = colorlog.ColoredFormatter(
        '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'bold_red',
        }
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:  # Prevent duplicate handlers
        stream_handler = colorlog.StreamHandler()
        stream_handler.setFormatter(color_formatter)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

        logger.addHandler(stream_handler)
        logger.addHandler(file_handler)

    return logger


def log_function_call(get_logger):
    """
    Decorator logging entry and exit of a pipeline stage.
    Accepts a logger, or a zero-argument callable returning one.
    Use as: @log_function_call(logger)
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger if isinstance(get_logger, logging.Logger) else get_logger()
            logger.info(f"Calling function {func.__name__}")
            result = func(*args, **kwargs)
            logger.info(f"Function {func.__name__} completed")
            return result
        return wrapper
    return decorator
