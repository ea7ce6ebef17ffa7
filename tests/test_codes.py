"""Tests for link code generation."""

from __future__ import annotations

import re
from unittest.mock import patch

import pytest

from keepalive.errors import CodeSpaceExhausted
from keepalive.registry.codes import CODE_ALPHABET, MAX_CODE_LENGTH, generate_code, generate_unique_code

CODE_RE = re.compile(r"^[A-Z0-9]{6}$")


class TestGenerateCode:
    def test_format(self):
        for _ in range(200):
            assert CODE_RE.match(generate_code())

    def test_custom_length(self):
        assert len(generate_code(10)) == 10

    def test_alphabet(self):
        assert CODE_ALPHABET == "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class TestGenerateUniqueCode:
    def test_no_collision(self):
        code = generate_unique_code({"AAAAAA"})
        assert CODE_RE.match(code)
        assert code != "AAAAAA"

    def test_retries_on_collision_case_insensitive(self):
        with patch(
            "keepalive.registry.codes.generate_code",
            side_effect=["ABC123", "ABC123", "XYZ789"],
        ) as mock_gen:
            code = generate_unique_code(["abc123"])
        assert code == "XYZ789"
        assert mock_gen.call_count == 3

    def test_falls_back_to_longer_codes(self):
        def fake(length: int) -> str:
            return "A" * length if length == 6 else "B" * length

        with patch("keepalive.registry.codes.generate_code", side_effect=fake):
            code = generate_unique_code({"AAAAAA"}, max_attempts=3)
        assert code == "BBBBBBBB"

    def test_exhausted(self):
        taken = {"Z" * n for n in range(6, MAX_CODE_LENGTH + 1, 2)}
        with patch("keepalive.registry.codes.generate_code", side_effect=lambda n: "Z" * n):
            with pytest.raises(CodeSpaceExhausted):
                generate_unique_code(taken, max_attempts=2)
