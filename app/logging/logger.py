import logging
import sys
import time
from collections.abc import Generator
from contextlib import contextmanager


class Log:
    """Centralized logging for the import core.

    Messages go to the ``finimport`` logger. Callers must never pass
    un-anonymized document text.
    """

    _logger: logging.Logger = logging.getLogger("finimport")

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Set the level and attach a stdout handler once."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(name)s [%(levelname)s] %(message)s")
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def stage(cls, name: str) -> Generator[None, None, None]:
        """Log how long a pipeline stage took, also when it raises."""
        started = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            cls._logger.debug(f"Stage {name} took {elapsed_ms:.1f} ms")

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)

    @classmethod
    def exception(cls, message: str, **kwargs: object) -> None:
        """Log at ERROR with the active exception traceback."""
        cls._logger.exception(message, extra=kwargs)
