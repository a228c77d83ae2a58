import logging
import os
from logging.handlers import RotatingFileHandler
from pinna.core.config import settings

class LoggerConfig:
    """
    Logger for the catalog engine. Writes to the console and, unless
    LOG_TO_FILE is off, to a rotating file under LOG_DIRECTORY.
    """
    def __init__(
        self, env=20, logger_name="Pinna", log_directory="logs", log_file="pinna.log", to_file=True
    ):
        try:
            self.logger_name = logger_name
            self.log_directory = os.path.abspath(log_directory)
            self.log_file_path = os.path.join(self.log_directory, log_file)
            self.env = env
            self.to_file = to_file
            self.log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

            self.logger = logging.getLogger(self.logger_name)
            self.setup_logger()
        except Exception as e:
            print(f"Failed to initialize logger: {str(e)}")

    def _build_handlers(self) -> list[logging.Handler]:
        handlers: list[logging.Handler] = [logging.StreamHandler()]
        if self.to_file:
            os.makedirs(self.log_directory, exist_ok=True)
            handlers.append(RotatingFileHandler(
                self.log_file_path, backupCount=5, maxBytes=1024 * 1024 * 10, encoding="utf-8"
            ))
        return handlers

    def setup_logger(self):
        try:
            formatter = logging.Formatter(self.log_format)

            # Re-importing the module must not stack handlers
            if not self.logger.hasHandlers():
                for handler in self._build_handlers():
                    handler.setLevel(self.env)
                    handler.setFormatter(formatter)
                    self.logger.addHandler(handler)

            self.logger.setLevel(self.env)

        except Exception as e:
            print(f"Failed to setup logger handlers: {str(e)}")

    def log(self, level: int, message: str, extra: dict = None):
        """Log a message, appending any structured context."""
        if extra:
            message = f"{message} | {extra}"
        self.logger.log(level, message)

logs = LoggerConfig(
    env=settings.LOGGER,
    logger_name="PINNA",
    log_directory=settings.LOG_DIRECTORY,
    log_file="pinna.log",
    to_file=settings.LOG_TO_FILE
)
