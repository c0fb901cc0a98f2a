"""Tests for poetry.lock reading."""

from pathlib import Path

import pytest
from conftest import POETRY_LOCK

from lstn.ecosystems import Ecosystem, Lockfile
from lstn.ecosystems.pypi import PoetryLock, canonical_name
from lstn.errors import DecodingError, InputError


class TestPoetryLock:
    """Tests for PoetryLock."""

    def test_names(self) -> None:
        lock = PoetryLock.parse(POETRY_LOCK.encode())
        assert lock.names() == {"certifi", "idna"}

    def test_nothing_ignored_keeps_raw_bytes(self) -> None:
        raw = POETRY_LOCK.encode()
        assert PoetryLock.parse(raw).without(["requests"]) is raw

    def test_ignored_packages_are_dropped(self) -> None:
        lock = PoetryLock.parse(POETRY_LOCK.encode())
        filtered = PoetryLock.parse(lock.without(["IDNA"]))
        assert filtered.names() == {"certifi"}
        assert filtered.data["metadata"]["lock-version"] == "2.0"

    def test_sub_tables_go_with_their_package(self) -> None:
        text = POETRY_LOCK.replace(
            'python-versions = ">=3.5"\n',
            'python-versions = ">=3.5"\n\n[package.extras]\nall = ["x"]\n\n[[package.files]]\nfile = "idna-3.4.tar.gz"\n',
        )
        lock = PoetryLock.parse(text.encode())
        filtered = lock.without(["idna"]).decode()
        assert "package.extras" not in filtered
        assert "idna-3.4.tar.gz" not in filtered
        assert PoetryLock.parse(filtered.encode()).names() == {"certifi"}

    def test_canonical_name(self) -> None:
        assert canonical_name("Zope.Interface") == "zope-interface"
        assert canonical_name("typing__extensions") == "typing-extensions"

    def test_read(self, tmp_path: Path) -> None:
        (tmp_path / "poetry.lock").write_text(POETRY_LOCK)
        assert PoetryLock.read(tmp_path).raw == POETRY_LOCK.encode()

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(InputError, match="does not contain the poetry.lock file"):
            PoetryLock.read(tmp_path)

    def test_invalid_toml(self) -> None:
        with pytest.raises(DecodingError, match="couldn't decode from the input poetry.lock contents"):
            PoetryLock.parse(b"[[package]\nname =")


class TestLockfile:
    """Tests for lockfile name recognition."""

    def test_from_path(self) -> None:
        assert Lockfile.from_name("sub/dir/poetry.lock") is Lockfile.POETRY_LOCK
        assert Lockfile.from_name("package-lock.json") is Lockfile.PACKAGE_LOCK

    def test_unknown(self) -> None:
        assert Lockfile.from_name("yarn.lock") is None

    def test_ecosystem(self) -> None:
        assert Lockfile.POETRY_LOCK.ecosystem is Ecosystem.PYPI
        assert Lockfile.PACKAGE_LOCK.ecosystem is Ecosystem.NPM
