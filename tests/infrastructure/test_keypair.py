"""Tests for keypair file loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from solders.keypair import Keypair

from solctl.domain.errors import KeypairError
from solctl.infrastructure.keypair import read_keypair
from tests.conftest import write_keypair


class TestReadKeypair:
    def test_round_trips_cli_format(self, tmp_path: Path) -> None:
        keypair = Keypair()
        path = tmp_path / "id.json"
        write_keypair(keypair, path)

        assert json.loads(path.read_text())[:4] == list(bytes(keypair))[:4]
        assert read_keypair(path).pubkey() == keypair.pubkey()

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nope.json"
        with pytest.raises(KeypairError, match="Failed to read keypair") as exc_info:
            read_keypair(path)
        assert exc_info.value.detail == {"path": str(path)}

    @pytest.mark.parametrize(
        "content",
        ["not json", "[1, 2, 3]", '{"secret": []}', json.dumps([300] * 64)],
        ids=["garbage", "short", "object", "out-of-range"],
    )
    def test_malformed_content(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "id.json"
        path.write_text(content)
        with pytest.raises(KeypairError):
            read_keypair(path)
