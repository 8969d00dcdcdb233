"""
Unit tests for path helpers.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from shared_utils.path_utils import ensure_directory, find_files, validate_file_exists


def test_ensure_directory_creates_parents(tmp_path):
    target = ensure_directory(tmp_path / 'a' / 'b')
    assert target.is_dir()
    assert ensure_directory(target) == target


class TestFindFiles:

    def test_sorted_and_files_only(self, tmp_path):
        (tmp_path / 'sub').mkdir()
        for name in ('b.csv', 'a.csv', 'sub/c.csv', 'notes.txt'):
            (tmp_path / name).write_text('x')

        flat = find_files(tmp_path, '*.csv', recursive=False)
        assert [f.name for f in flat] == ['a.csv', 'b.csv']

        nested = find_files(tmp_path, '*.csv')
        assert sorted(f.name for f in nested) == ['a.csv', 'b.csv', 'c.csv']

    def test_missing_directory_is_empty(self, tmp_path):
        assert find_files(tmp_path / 'absent', '*.csv') == []


class TestValidateFileExists:

    def test_existing_file(self, tmp_path):
        path = tmp_path / 'eez.gpkg'
        path.write_text('x')
        assert validate_file_exists(str(path), 'EEZ') == path

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match='EEZ file not found'):
            validate_file_exists(tmp_path / 'eez.gpkg', 'EEZ')

    def test_directory_is_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            validate_file_exists(tmp_path)
