from .logging_setup import cleanup_logger, create_logger, create_sub_logger

__all__ = [
    "create_logger",
    "cleanup_logger",
    "create_sub_logger",
]
