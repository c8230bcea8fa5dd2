"""Shared fixtures for the replay decoder tests."""

from pathlib import Path

import pytest

import w3g_builder as wb

PROJECT_ROOT = Path(__file__).parent.parent
REPLAYS_DIR = PROJECT_ROOT / "replays"


@pytest.fixture
def classic_buffer():
    """Decompressed buffer of a classic replay with two extra players."""
    info = wb.game_info(
        host=(1, "Host", 2, b"\x00\x00"),
        players=[(2, "Alice", 1, b"\x07"), (3, "Bob", 8, bytes(8))],
        settings=wb.settings_bytes(map_path="Maps\\(2)Classic.w3x", creator="Blizzard"),
    )
    return info + wb.sample_events()


@pytest.fixture
def reforged_buffer():
    """Decompressed buffer of a reforged replay with clan tags."""
    info = wb.game_info(
        host=(1, "Host"),
        reforged=[
            wb.reforged_record(1, "Host", "CLAN"),
            wb.reforged_record(2, "Guest", "", trailer=b"\x20\x01\x28\x00"),
        ],
        settings=wb.settings_bytes(
            map_path="Maps/Download/d57df8794b66784681a0ba4a3295b4aef142fde4/(2)TerenasStand_LV.w3x",
            creator="Blizzard Entertainment",
        ),
    )
    return info + wb.sample_events()


@pytest.fixture
def reforged_replay(reforged_buffer):
    """Complete container bytes wrapping ``reforged_buffer``."""
    return wb.container(reforged_buffer)


@pytest.fixture
def classic_replay(classic_buffer):
    return wb.container(classic_buffer, chunk_size=4096)
