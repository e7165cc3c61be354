"""Validation utilities for URL shortener."""

import re
from urllib.parse import urlparse
from typing import Tuple


MAX_URL_LENGTH = 2048

# Paths served by the web app that a custom code must not shadow
RESERVED_WORDS = {
    "api", "health", "stats", "create", "result", "shorturls",
    "static", "assets", "favicon", "robots", "sitemap", "docs",
}


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"
    
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"
    
    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    
    # Check if scheme is http or https
    if result.scheme not in ["http", "https"]:
        return False, "URL must use http or https protocol"
    
    # Check if netloc (domain) exists
    if not result.hostname:
        return False, "URL must have a valid domain"
    
    return True, ""


def is_valid_short_code(
    short_code: str,
    min_length: int = 3,
    max_length: int = 10,
    check_reserved: bool = True,
) -> Tuple[bool, str]:
    """Validate a short code.

    Args:
        short_code: The short code to validate
        min_length: Minimum length for short code
        max_length: Maximum length for short code
        check_reserved: Reject route names (off when validating a lookup)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"
    
    if len(short_code) < min_length:
        return False, f"Short code must be at least {min_length} characters"
    
    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"
    
    if not re.fullmatch(r'[a-zA-Z0-9]+', short_code):
        return False, "Short code can only contain letters and numbers"
    
    if check_reserved and short_code.lower() in RESERVED_WORDS:
        return False, f"'{short_code}' is a reserved word and cannot be used"
    
    return True, ""


def is_valid_validity(validity_minutes, max_minutes: int = 525600) -> Tuple[bool, str]:
    """Validate a validity period in minutes.
    
    Args:
        validity_minutes: Requested lifetime of the short URL
        max_minutes: Upper bound (one year by default)
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    # bool is an int subclass but never a meaningful validity
    if isinstance(validity_minutes, bool) or not isinstance(validity_minutes, int):
        return False, "Validity must be an integer number of minutes"
    
    if validity_minutes < 1:
        return False, "Validity must be at least 1 minute"
    
    if validity_minutes > max_minutes:
        return False, f"Validity cannot exceed {max_minutes} minutes"
    
    return True, ""
