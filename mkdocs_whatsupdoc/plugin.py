"""
MkDocs plugin for documenting EScript bindings written in C++.

Hooks into MkDocs' build lifecycle: on config it parses the configured C++
sources and builds the compound registry, then it adds one generated page
per documented namespace, type and group plus an index page, and injects a
nav section pointing at them.
"""

from __future__ import annotations

import logging
import os

from mkdocs.config import config_options
from mkdocs.config.base import Config as MkDocsConfig
from mkdocs.plugins import BasePlugin
from mkdocs.structure.files import File

from .config import ConfigError, ProjectConfig, load_config
from .extractor import Extractor
from .model import CompoundKind
from .output import json_filename, write_json
from .parser import extract_project
from .renderer import RenderConfig, render_compound, render_index

log = logging.getLogger("mkdocs.plugins.whatsupdoc")

_NAV_SECTIONS = (
    (CompoundKind.NAMESPACE, "Namespaces"),
    (CompoundKind.TYPE, "Types"),
    (CompoundKind.GROUP, "Groups"),
)


class WhatsupdocConfig(MkDocsConfig):
    config_file = config_options.Type(str, default="")
    project_folder = config_options.Type(str, default="")
    input = config_options.Type(list, default=[])
    include = config_options.Type(list, default=[])
    predefined = config_options.Type(list, default=[])
    flags = config_options.Type(list, default=[])
    output_dir = config_options.Type(str, default="escript")
    nav_title = config_options.Type(str, default="EScript API")
    heading_level = config_options.Type(int, default=1)
    json_output = config_options.Type(str, default="")


def _page_uri(compound, output_dir):
    return f"{output_dir}/{json_filename(compound.id)[: -len('.json')]}.md"


class WhatsupdocPlugin(BasePlugin[WhatsupdocConfig]):
    def __init__(self):
        super().__init__()
        self._extractor = None
        self._pages = {}
        self._uris = {}
        self._use_dir_urls = True

    # ── project setup ──

    def _project(self, config_dir):
        cfg_file = self.config.get("config_file", "")
        if cfg_file:
            if not os.path.isabs(cfg_file):
                cfg_file = os.path.normpath(os.path.join(config_dir, cfg_file))
            return load_config(cfg_file)

        root = self.config.get("project_folder", "") or "."
        if not os.path.isabs(root):
            root = os.path.normpath(os.path.join(config_dir, root))
        return ProjectConfig(
            project_folder=root,
            input=list(self.config.get("input", [])),
            include=list(self.config.get("include", [])),
            predefined=list(self.config.get("predefined", [])),
            flags=list(self.config.get("flags", [])),
        )

    def _plan_pages(self):
        out_dir = self.config["output_dir"]
        self._pages.clear()
        self._uris.clear()
        for compound in self._extractor.registry.named_compounds():
            uri = _page_uri(compound, out_dir)
            self._pages[uri] = compound.id
            self._uris[compound.id] = uri
        self._pages[f"{out_dir}/index.md"] = "__INDEX__"

    def _build_nav_tree(self):
        out_dir = self.config["output_dir"]
        registry = self._extractor.registry
        tree = [{"Overview": f"{out_dir}/index.md"}]
        for kind, title in _NAV_SECTIONS:
            entries = sorted(
                (c for c in registry.named_compounds() if c.kind is kind),
                key=lambda c: registry.full_name(c).lower(),
            )
            if entries:
                tree.append({title: [{registry.full_name(c): self._uris[c.id]} for c in entries]})
        return tree

    def _inject_nav(self, config):
        top_title = self.config["nav_title"]
        section = {top_title: self._build_nav_tree()}
        nav = config.get("nav")
        if nav is None:
            config["nav"] = [section]
            return
        for i, item in enumerate(nav):
            if isinstance(item, dict) and top_title in item:
                nav[i] = section
                return
        nav.append(section)

    # ── links ──

    def _link_from(self, current_uri):
        def link(compound):
            target = self._uris.get(compound.id)
            if target is None:
                return None
            if target == current_uri:
                return ""
            if self._use_dir_urls:
                # foo/bar.md is served as foo/bar/, foo/index.md as foo/
                if current_uri.endswith("/index.md"):
                    from_dir = os.path.dirname(current_uri)
                else:
                    from_dir = current_uri.removesuffix(".md")
                rel = os.path.relpath(target.removesuffix(".md"), from_dir)
                return rel.replace(os.sep, "/") + "/"
            return os.path.relpath(target, os.path.dirname(current_uri)).replace(os.sep, "/")

        return link

    def _rcfg(self):
        return RenderConfig(heading_level=self.config["heading_level"])

    # ── MkDocs lifecycle hooks ──

    def on_config(self, config, **kwargs):
        config_dir = os.path.dirname(config.get("config_file_path", "")) or os.getcwd()
        self._use_dir_urls = config.get("use_directory_urls", True)

        try:
            project = self._project(config_dir)
        except ConfigError as exc:
            log.error("whatsupdoc: %s", exc)
            return config
        if not os.path.isdir(project.project_folder):
            log.error("whatsupdoc: invalid project folder '%s'", project.project_folder)
            return config

        self._extractor = Extractor()
        nfiles = extract_project(project, self._extractor)
        self._plan_pages()
        self._inject_nav(config)

        # generated pages link to each other with directory-style URLs
        try:
            config["validation"]["links"]["unrecognized_links"] = 0
        except (KeyError, TypeError):
            pass

        log.info(
            "whatsupdoc: %d file(s) parsed, %d compound(s), %d diagnostic(s)",
            nfiles,
            len(self._uris),
            len(self._extractor.diagnostics),
        )
        return config

    def on_files(self, files, *, config, **kwargs):
        for uri in sorted(self._pages):
            f = File.generated(config, uri, content="")
            f.edit_uri = None
            files.append(f)
        return files

    def on_page_markdown(self, markdown, *, page, config, files, **kwargs):
        src_uri = getattr(page.file, "src_uri", None) or page.file.src_path
        target = self._pages.get(src_uri)
        if target is None:
            return markdown

        registry = self._extractor.registry
        link = self._link_from(src_uri)
        if target == "__INDEX__":
            return render_index(registry, self._rcfg(), link, title=self.config["nav_title"])
        compound = registry.get(target)
        if compound is None:
            return markdown
        return render_compound(compound, registry, self._rcfg(), link)

    def on_post_build(self, *, config, **kwargs):
        json_dir = self.config.get("json_output", "")
        if not json_dir or self._extractor is None:
            return
        if not os.path.isabs(json_dir):
            config_dir = os.path.dirname(config.get("config_file_path", "")) or os.getcwd()
            json_dir = os.path.normpath(os.path.join(config_dir, json_dir))
        write_json(self._extractor.registry, json_dir)
