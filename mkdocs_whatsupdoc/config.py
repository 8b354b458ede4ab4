"""
Configuration: binding conventions and the ``KEY = VALUE`` project file.

Project file keys::

    PROJECT_FOLDER   = .            # root every other path is relative to
    OUTPUT_DIRECTORY = json         # must exist
    INPUT            = src ext      # scanned for *.cpp, also used as includes
    INCLUDE          = third_party  # extra include roots
    PREDEFINED       = NDEBUG ES_X=1
    FLAGS            = -std=c++17
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


class ConfigError(ValueError):
    pass


@dataclass
class BindingConfig:
    namespace_marker: str = "EScript::Namespace"
    type_marker: str = "EScript::Type"
    value_wrappers: tuple[str, ...] = ("EScript::ObjPtr", "EScript::ObjRef", "EScript::_Ptr")
    declare_function: str = "declareFunction"
    declare_constant: str = "declareConstant"
    init_function: str = "init"
    class_name_accessor: str = "getClassName"


@dataclass
class ProjectConfig:
    project_folder: str = "."
    output_directory: str = "json"
    input: list[str] = field(default_factory=list)
    include: list[str] = field(default_factory=list)
    predefined: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)

    def _abs(self, path):
        if os.path.isabs(path):
            return os.path.normpath(path)
        return os.path.normpath(os.path.join(self.project_folder, path))

    @property
    def output_path(self):
        return self._abs(self.output_directory)

    @property
    def input_paths(self):
        return [self._abs(p) for p in (self.input or [""])]

    @property
    def include_paths(self):
        # INPUT roots double as include roots, as do the project folder itself
        roots = [self.project_folder] + [self._abs(p) for p in self.input + self.include]
        out = []
        for r in roots:
            r = os.path.normpath(r)
            if r not in out:
                out.append(r)
        return out

    def clang_args(self, include_paths=None):
        if include_paths is None:
            include_paths = self.include_paths
        args = []
        for inc in include_paths:
            args.append(f"-I{inc}")
        for define in self.predefined:
            args.append(f"-D{define}")
        args.extend(self.flags)
        return args


_LIST_KEYS = {
    "INPUT": "input",
    "INCLUDE": "include",
    "PREDEFINED": "predefined",
    "FLAGS": "flags",
}


def parse_config(text, base_dir="."):
    cfg = ProjectConfig()
    for lineno, raw in enumerate(text.split("\n"), 1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep or not key.strip():
            raise ConfigError(f"invalid entry in config file at line {lineno}")
        key, value = key.strip(), value.strip()
        if key == "PROJECT_FOLDER":
            cfg.project_folder = value
        elif key == "OUTPUT_DIRECTORY":
            cfg.output_directory = value
        elif key in _LIST_KEYS:
            getattr(cfg, _LIST_KEYS[key]).extend(v for v in value.split() if v)
    if not os.path.isabs(cfg.project_folder):
        cfg.project_folder = os.path.join(base_dir, cfg.project_folder)
    cfg.project_folder = os.path.normpath(cfg.project_folder)
    return cfg


def load_config(path):
    if not os.path.isfile(path):
        raise ConfigError(f"config file '{path}' not found.")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        text = f.read()
    return parse_config(text, base_dir=os.path.dirname(os.path.abspath(path)))


def validate(cfg):
    """Raise ConfigError unless the project and output folders exist."""
    if not os.path.isdir(cfg.project_folder):
        raise ConfigError(f"invalid project folder '{cfg.project_folder}'.")
    if not os.path.isdir(cfg.output_path):
        raise ConfigError(f"invalid output folder '{cfg.output_path}'.")
