"""Build tooling for the OWASP Smart Contract Security Testing Guide.

Renders the guide's Markdown chapters into PDF and EPUB books with Pandoc.
"""

__version__ = "1.0.0"
