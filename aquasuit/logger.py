import logging
import sys


class Logger:
    """Initialize the aquasuit logger. The logger outputs to stdout and, when given a path, to a file.

    :param log_file:                    Optional full path with file name and extension to a log file
    :type log_file:                     str

    :param level:                       Logging level
    :type level:                        int

    """

    # output format for log string
    LOG_FORMAT_STRING = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    def __init__(self, log_file=None, level=logging.INFO):

        self.log_file = log_file
        self.level = level
        self.log_format = logging.Formatter(self.LOG_FORMAT_STRING)
        self.logger = self.set_logger()
        self.initialize_logger()

    def set_logger(self):
        """Initialize root logger at the requested level."""

        logger = logging.getLogger()
        logger.setLevel(self.level)

        return logger

    def initialize_logger(self):
        """Construct console and file handlers."""

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.level)
        console_handler.setFormatter(self.log_format)
        self.logger.addHandler(console_handler)

        if self.log_file is not None:
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(self.level)
            file_handler.setFormatter(self.log_format)
            self.logger.addHandler(file_handler)

    @staticmethod
    def close_logger():
        """Shutdown logger."""

        # Remove logging handlers
        logger = logging.getLogger()

        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

        logging.shutdown()
