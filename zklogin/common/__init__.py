# Common utilities
from zklogin.common.crypto import CryptoUtils as CryptoUtils
from zklogin.common.logging_utils import setup_logger as setup_logger

__all__ = ["CryptoUtils", "setup_logger"]
