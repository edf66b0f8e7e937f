"""
Static Analysis Package.

This package contains the detection pipeline run over a loaded unit.

Modules:
    - ``matcher``: Collecting identifiers typed as the sentinel.
    - ``grouper``: Partitioning occurrences by symbol.
    - ``overwrite``: Deciding which groups are overwritten.
"""
