"""Filesystem skills confined to a root directory."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field

from ai_agent.skills.base import ResultCallback, Skill


class PathParams(BaseModel):
    path: str = Field(description="Path relative to the skill's root directory")


class FileWriteParams(PathParams):
    content: str
    mode: Literal["overwrite", "append"] = "overwrite"


class _RootedSkill(Skill):
    """Base for skills that resolve paths inside ``root_dir``."""

    def __init__(self, root_dir: str | Path) -> None:
        self.root_dir = Path(root_dir).expanduser().resolve()

    def _resolve(self, path: str) -> Path:
        target = (self.root_dir / path.lstrip("/")).resolve()
        if target != self.root_dir and self.root_dir not in target.parents:
            raise PermissionError(f"path '{path}' escapes the root directory")
        return target


# ── Files ─────────────────────────────────────────────────────────


class FileReaderSkill(_RootedSkill):
    description = """Read the content of a text file.
Parameters:
- path: string - file path relative to the workspace root
Returns: the file content"""
    params = PathParams

    async def execute(self, params: PathParams, on_result: ResultCallback) -> None:
        target = self._resolve(params.path)
        await on_result(target.read_text(encoding="utf-8"))


class FileWriterSkill(_RootedSkill):
    description = """Write text to a file, creating parent directories as needed.
Parameters:
- path: string - file path relative to the workspace root
- content: string - text to write
- mode: string - overwrite (default) or append"""
    params = FileWriteParams

    async def execute(self, params: FileWriteParams, on_result: ResultCallback) -> None:
        target = self._resolve(params.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "a" if params.mode == "append" else "w", encoding="utf-8") as f:
            f.write(params.content)
        logger.debug(f"FileWriterSkill: {params.mode} {len(params.content)} chars to {target}")


class FileRemoverSkill(_RootedSkill):
    description = """Delete a file.
Parameters:
- path: string - file path relative to the workspace root"""
    params = PathParams

    async def execute(self, params: PathParams, on_result: ResultCallback) -> None:
        target = self._resolve(params.path)
        if target.is_dir():
            raise IsADirectoryError(f"'{params.path}' is a directory")
        target.unlink()


# ── Directories ───────────────────────────────────────────────────


class DirectoryReaderSkill(_RootedSkill):
    description = """List the entries of a directory. Sub-directories end with '/'.
Parameters:
- path: string - directory path relative to the workspace root"""
    params = PathParams

    async def execute(self, params: PathParams, on_result: ResultCallback) -> None:
        target = self._resolve(params.path)
        entries = sorted(
            entry.name + ("/" if entry.is_dir() else "")
            for entry in target.iterdir()
        )
        await on_result(entries)


class DirectoryWriterSkill(_RootedSkill):
    description = """Create directories at the specified path. This skill creates new directories and any necessary parent directories recursively.
Parameters:
- path: string - directory path relative to the workspace root"""
    params = PathParams

    async def execute(self, params: PathParams, on_result: ResultCallback) -> None:
        self._resolve(params.path).mkdir(parents=True, exist_ok=True)


class DirectoryRemoverSkill(_RootedSkill):
    description = """Remove a directory and everything inside it.
Parameters:
- path: string - directory path relative to the workspace root"""
    params = PathParams

    async def execute(self, params: PathParams, on_result: ResultCallback) -> None:
        target = self._resolve(params.path)
        if target == self.root_dir:
            raise PermissionError("refusing to remove the root directory")
        shutil.rmtree(target)
