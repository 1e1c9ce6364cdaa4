"""Local profile checks and archiving for ``compli upload``.

A profile directory is identified by its ``inspec.yml`` metadata file,
which must declare a ``name``. Directories are packed into a gzip
tarball before upload; ready-made archives are uploaded as they are.
"""

from __future__ import annotations

import tarfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

METADATA_FILENAME = "inspec.yml"
ARCHIVE_SUFFIXES = (".tar.gz", ".tgz", ".zip")


class ProfileCheckResult(BaseModel):
    """Outcome of :func:`check_profile`."""

    valid: bool
    name: Optional[str] = None
    errors: list[str] = Field(default_factory=list)


def is_archive(path: Path) -> bool:
    return path.is_file() and path.name.endswith(ARCHIVE_SUFFIXES)


def _archive_stem(path: Path) -> str:
    for suffix in ARCHIVE_SUFFIXES:
        if path.name.endswith(suffix):
            return path.name[: -len(suffix)]
    return path.stem


def load_metadata(path: Path) -> dict[str, Any]:
    """Parse ``inspec.yml`` inside the profile directory *path*.

    Raises:
        FileNotFoundError: If the metadata file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    text = (path / METADATA_FILENAME).read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def check_profile(path: Path) -> ProfileCheckResult:
    """Check that *path* is an uploadable profile.

    Archives are accepted as-is and named after their file stem. A
    directory is valid when its ``inspec.yml`` parses and has a non-empty
    ``name``.
    """
    if is_archive(path):
        return ProfileCheckResult(valid=True, name=_archive_stem(path))
    if not path.is_dir():
        return ProfileCheckResult(valid=False, errors=[f"{path} is neither a directory nor an archive"])

    try:
        metadata = load_metadata(path)
    except FileNotFoundError:
        return ProfileCheckResult(valid=False, errors=[f"Missing {METADATA_FILENAME} in {path}"])
    except yaml.YAMLError as exc:
        return ProfileCheckResult(valid=False, errors=[f"Invalid {METADATA_FILENAME}: {exc}"])

    name = metadata.get("name")
    if not name or not isinstance(name, str):
        return ProfileCheckResult(
            valid=False, errors=[f"{METADATA_FILENAME} must declare a profile name"]
        )
    return ProfileCheckResult(valid=True, name=name)


def archive_profile(path: Path, output: Path) -> Path:
    """Pack the profile directory *path* into a gzip tarball at *output*.

    Entries are stored relative to the profile root; an existing *output*
    is overwritten.
    """
    output.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(output, "w:gz") as tar:
        for item in sorted(path.rglob("*")):
            if item.resolve() == output.resolve():
                continue
            tar.add(item, arcname=str(item.relative_to(path)), recursive=False)
    return output
