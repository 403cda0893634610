"""
Logging configuration for the Kindred backend
"""
import logging
import os


def _default_level():
    explicit = os.environ.get('LOG_LEVEL')
    if explicit:
        return getattr(logging, explicit.upper(), logging.INFO)
    return logging.DEBUG if os.environ.get('FLASK_ENV') == 'development' else logging.INFO


def setup_logger(name, level=None):
    """Setup logger with consistent formatting"""
    if level is None:
        level = _default_level()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

    logger.addHandler(handler)

    return logger


def log_error(logger, error, context=None):
    """Log error with context"""
    error_msg = f"Error: {str(error)}"
    if context:
        error_msg += f" | Context: {context}"
    logger.error(error_msg)


def log_audit(logger, user_id, action, details=None):
    """Log security-relevant actions (logins, swipes, admin writes)"""
    audit_msg = f"AUDIT: User {user_id} | Action: {action}"
    if details:
        audit_msg += f" | Details: {details}"
    logger.info(audit_msg)
