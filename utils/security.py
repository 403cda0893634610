"""
Security utilities for input sanitization and validation
"""
import re
import html
from urllib.parse import urlparse

import bleach

# HTML tags allowed in user content
ALLOWED_HTML_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br']

MIN_PASSWORD_LENGTH = 8

# Profile fields that keep a small set of formatting tags
RICH_TEXT_FIELDS = ('bio',)


def sanitize_input(text, allow_html=False):
    """Sanitize user input to prevent XSS"""
    if not text or not isinstance(text, str):
        return text

    if allow_html:
        text = bleach.clean(text, tags=ALLOWED_HTML_TAGS, strip=True)
    else:
        text = html.escape(text, quote=False)

    return text.replace('\x00', '').strip()


def validate_email(email):
    """Validate email format"""
    if not email or not isinstance(email, str):
        return False

    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email) is not None


def validate_password(password):
    """Validate password meets the minimum requirements"""
    if not password or not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    return True, "Password is valid"


def validate_url(url):
    """Validate URL format and scheme"""
    if not url or not isinstance(url, str):
        return False

    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ['http', 'https'] and bool(parsed.netloc)
