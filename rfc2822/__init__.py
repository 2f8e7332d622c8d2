"""A package for parsing the header fields of RFC 2822 messages."""

__all__ = [
    'errors',
    'header',
    'policy',
    'utils',
    ]
