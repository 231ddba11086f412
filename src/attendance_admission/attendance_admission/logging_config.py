"""
Cấu hình logging cho máy chủ chấm công
"""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path
from typing import Union

from flask import Flask

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"


def setup_logging(
    app: Flask,
    log_level: str = "INFO",
    *,
    log_dir: Union[str, Path] = "logs",
    max_log_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Thiết lập logging cho ứng dụng Flask.

    - logs/admission.log: mọi log từ `log_level`
    - logs/errors.log: chỉ ERROR trở lên
    - logs/security.log: logger `security` (token sai, giả mạo user_id)
    """

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, str(log_level).upper(), logging.INFO)

    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def rotating(name: str, handler_level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            log_dir / name, maxBytes=max_log_size, backupCount=backup_count, encoding="utf-8"
        )
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        return handler

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(rotating("admission.log", level))
    root_logger.addHandler(console_handler)
    root_logger.addHandler(rotating("errors.log", logging.ERROR))

    security_logger = logging.getLogger("security")
    for handler in security_logger.handlers[:]:
        security_logger.removeHandler(handler)
    security_logger.addHandler(rotating("security.log", logging.INFO))
    security_logger.setLevel(logging.INFO)

    app.logger.setLevel(level)
    app.logger.info("Attendance admission server starting (log level %s, dir %s)", logging.getLevelName(level), log_dir.absolute())
