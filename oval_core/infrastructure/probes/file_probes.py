"""
File system probes: file metadata and regular-expression matches on text files.
"""

import errno
import os
import re
import stat
from pathlib import Path
from typing import List, Tuple

from oval_core.logic.models import Item, OvalObject
from oval_core.infrastructure.parsers.xml_utils import INDEPENDENT_SC_NS, UNIX_SC_NS
from .base_probe import BaseProbe, UnsupportedObjectError


_FILE_TYPES = (
    (stat.S_ISREG, "regular"),
    (stat.S_ISDIR, "directory"),
    (stat.S_ISLNK, "symbolic link"),
    (stat.S_ISCHR, "character special"),
    (stat.S_ISBLK, "block special"),
    (stat.S_ISFIFO, "fifo"),
    (stat.S_ISSOCK, "socket"),
)


def _file_type(mode: int) -> str:
    for predicate, name in _FILE_TYPES:
        if predicate(mode):
            return name
    return "unknown"


class _PathProbe(BaseProbe):
    """Resolves ``filepath`` or ``path``/``filename`` object entities to candidate files."""

    def resolve_paths(self, obj: OvalObject) -> List[Tuple[str, str]]:
        """
        Returns:
            (directory, file name) pairs of existing files matching the object
        """
        if obj.get_entity("filepath") is not None:
            entity = self.require_entity(obj, "filepath")
            if entity.operation != "equals":
                raise UnsupportedObjectError(f"{obj.id}: operation '{entity.operation}' on filepath")
            path = Path(entity.value or "")
            return [(str(path.parent), path.name)] if self._exists(path) else []

        path_entity = self.require_entity(obj, "path")
        if path_entity.operation != "equals":
            raise UnsupportedObjectError(f"{obj.id}: operation '{path_entity.operation}' on path")
        directory = Path(path_entity.value or "")
        if not directory.is_dir():
            return []

        filename_entity = self.require_entity(obj, "filename")
        if filename_entity.operation == "equals":
            candidate = directory / (filename_entity.value or "")
            return [(str(directory), candidate.name)] if self._exists(candidate) else []

        return [
            (str(directory), name) for name in sorted(os.listdir(directory))
            if self.entity_matches(filename_entity, name)
        ]

    def _exists(self, path: Path) -> bool:
        return path.exists() if self.config.follow_symlinks else os.path.lexists(path)

    def stat_path(self, path: str) -> os.stat_result:
        return os.stat(path) if self.config.follow_symlinks else os.lstat(path)


class FileProbe(_PathProbe):
    """Collects file metadata (type, size, ownership, permissions)."""

    @property
    def object_type(self) -> str:
        return "file"

    @property
    def item_namespace(self) -> str:
        return UNIX_SC_NS

    def is_applicable(self) -> bool:
        return os.name == "posix"

    def collect(self, obj: OvalObject) -> List[Item]:
        items = []
        for directory, name in self.resolve_paths(obj):
            filepath = os.path.join(directory, name)
            info = self.stat_path(filepath)
            mode = info.st_mode

            item = self.new_item()
            item.add_entity("filepath", filepath)
            item.add_entity("path", directory)
            item.add_entity("filename", name)
            item.add_entity("type", _file_type(mode))
            item.add_entity("group_id", info.st_gid, "int")
            item.add_entity("user_id", info.st_uid, "int")
            item.add_entity("a_time", int(info.st_atime), "int")
            item.add_entity("c_time", int(info.st_ctime), "int")
            item.add_entity("m_time", int(info.st_mtime), "int")
            item.add_entity("size", info.st_size, "int")
            for flag_name, flag in (("suid", stat.S_ISUID), ("sgid", stat.S_ISGID), ("sticky", stat.S_ISVTX),
                                    ("uread", stat.S_IRUSR), ("uwrite", stat.S_IWUSR), ("uexec", stat.S_IXUSR),
                                    ("gread", stat.S_IRGRP), ("gwrite", stat.S_IWGRP), ("gexec", stat.S_IXGRP),
                                    ("oread", stat.S_IROTH), ("owrite", stat.S_IWOTH), ("oexec", stat.S_IXOTH)):
                item.add_entity(flag_name, "true" if mode & flag else "false", "boolean")
            items.append(item)
        return items


class TextFileContent54Probe(_PathProbe):
    """Collects regular-expression matches from text files."""

    @property
    def object_type(self) -> str:
        return "textfilecontent54"

    @property
    def item_namespace(self) -> str:
        return INDEPENDENT_SC_NS

    def collect(self, obj: OvalObject) -> List[Item]:
        pattern_entity = self.require_entity(obj, "pattern")
        if pattern_entity.operation != "pattern match":
            raise UnsupportedObjectError(f"{obj.id}: pattern operation must be 'pattern match'")
        instance_entity = self.require_entity(obj, "instance")

        flags = 0
        if obj.behaviors.get("multiline", "true") == "true":
            flags |= re.MULTILINE
        if obj.behaviors.get("singleline", "false") == "true":
            flags |= re.DOTALL
        if obj.behaviors.get("ignore_case", "false") == "true":
            flags |= re.IGNORECASE

        try:
            regex = re.compile(pattern_entity.value or "", flags)
        except re.error as e:
            raise UnsupportedObjectError(f"{obj.id}: invalid pattern: {e}")

        items = []
        for directory, name in self.resolve_paths(obj):
            filepath = os.path.join(directory, name)
            text = self._read_text(filepath)
            for instance, match in enumerate(regex.finditer(text), start=1):
                if not self.entity_matches(instance_entity, str(instance)):
                    continue
                item = self.new_item()
                item.add_entity("filepath", filepath)
                item.add_entity("path", directory)
                item.add_entity("filename", name)
                item.add_entity("pattern", regex.pattern)
                item.add_entity("instance", instance, "int")
                item.add_entity("text", match.group(0))
                for group in match.groups():
                    item.add_entity("subexpression", group)
                items.append(item)
        return items

    def _read_text(self, filepath: str) -> str:
        limit = self.config.max_file_size_mb * 1024 * 1024
        size = self.stat_path(filepath).st_size
        if size > limit:
            raise OSError(errno.EFBIG, f"File exceeds {self.config.max_file_size_mb} MB limit", filepath)
        with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
            return f.read()


__all__ = ['FileProbe', 'TextFileContent54Probe']
