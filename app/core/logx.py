import logging
import sys

from app.core.config import settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Logx:
    """
    对标准库 logging 的一层薄封装：
    - 全项目共用一个 logger，避免重复添加 handler
    - is_debug(True) 可以临时把日志级别切到 DEBUG
    """

    def __init__(self, name: str, level: str = "INFO"):
        self._logger = logging.getLogger(name)
        self._level = logging.getLevelName(level.upper())
        if not isinstance(self._level, int):
            self._level = logging.INFO
        self._logger.setLevel(self._level)

        if not self._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(_FORMAT))
            self._logger.addHandler(handler)

    def is_debug(self, flag: bool) -> None:
        self._logger.setLevel(logging.DEBUG if flag else self._level)

    def debug(self, msg, *args, **kwargs):
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg, *args, **kwargs):
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg, *args, **kwargs):
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg, *args, **kwargs):
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg, *args, **kwargs):
        self._logger.exception(msg, *args, **kwargs)


logger = Logx("relations", settings.LOG_LEVEL)
logger.is_debug(settings.LOG_DEBUG)
