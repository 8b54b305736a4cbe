"""
로깅 설정.

setup_logging() 은 루트 로거에 콘솔 핸들러를 한 번만 붙인다.
각 모듈은 logging.getLogger(__name__) 으로 로거를 얻는다.
"""

import logging


def setup_logging(level: str = "INFO") -> None:
    """루트 로거 설정. 이미 핸들러가 있으면 (테스트, create_app 반복 호출) 건드리지 않는다."""
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
