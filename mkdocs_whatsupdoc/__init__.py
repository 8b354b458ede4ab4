"""
mkdocs-whatsupdoc: EScript binding documentation for MkDocs.

Walks the libclang AST of C++ binding code, collects the functions, constants
and nested namespaces/types registered through ``declareFunction``,
``declareConstant`` and ``init`` calls together with their doc comments, and
emits them as JSON records or browsable MkDocs pages.
"""

__version__ = "0.3.0"
