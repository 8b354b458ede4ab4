"""
Translation-unit front end.

Parses C++ sources with libclang and feeds each translation unit to an
Extractor.  Comments must survive parsing, hence ``-fparse-all-comments``.
"""

from __future__ import annotations

import logging
import os

from clang.cindex import Index, TranslationUnit, TranslationUnitLoadError

log = logging.getLogger("mkdocs.plugins.whatsupdoc")

_BASE_ARGS = ["-x", "c++", "-fparse-all-comments"]


def parse_file(filepath, extractor, clang_args=None):
    """Parse *filepath* and run *extractor* over it; return the number of
    registration functions visited."""
    idx = Index.create()
    args = _BASE_ARGS + list(clang_args or [])

    try:
        tu = idx.parse(filepath, args=args, options=TranslationUnit.PARSE_INCOMPLETE)
    except TranslationUnitLoadError as exc:
        raise RuntimeError(f"Failed to parse {filepath}: {exc}") from exc

    for diag in tu.diagnostics:
        if diag.severity >= 3:
            log.debug("whatsupdoc: clang: %s", diag)
    return extractor.visit_translation_unit(tu.cursor)


def discover_sources(root, extensions=(".cpp",)):
    out = []
    exts = [e if e.startswith(".") else f".{e}" for e in extensions]
    for dirpath, dirnames, fnames in os.walk(root):
        dirnames.sort()
        for fn in sorted(fnames):
            if os.path.splitext(fn)[1].lower() in exts:
                out.append(os.path.join(dirpath, fn))
    return out


def valid_dirs(paths, what):
    """Keep the existing directories of *paths*, logging the others."""
    out = []
    for p in paths:
        if os.path.isdir(p):
            out.append(p)
        else:
            log.warning("whatsupdoc: invalid %s folder '%s', skipped", what, p)
    return out


def extract_project(cfg, extractor):
    """Parse every source file under the configured input folders."""
    clang_args = cfg.clang_args(valid_dirs(cfg.include_paths, "include"))

    files = []
    for root in valid_dirs(cfg.input_paths, "input"):
        files.extend(f for f in discover_sources(root) if f not in files)

    parsed = 0
    for n, path in enumerate(files, 1):
        log.info("whatsupdoc: [%d/%d] %s", n, len(files), path)
        try:
            parse_file(path, extractor, clang_args)
        except RuntimeError as exc:
            log.error("whatsupdoc: %s", exc)
            continue
        parsed += 1
    return parsed
