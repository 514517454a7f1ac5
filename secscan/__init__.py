"""
SecScan - Static security scanning engine for source trees

Walks a project, runs pattern-based vulnerability detectors over each file
and keeps versioned scan reports:
- Cross-site scripting and request forgery
- SQL injection and path traversal
- Insecure authentication checks
- Hardcoded secrets

Copyright (c) 2026 SecScan Contributors
Licensed under the Apache License 2.0
"""

__version__ = "1.0.0"
__author__ = "chiakiichan"


__all__ = [
    "__version__",
]
