from __future__ import annotations

import os
from pathlib import Path

import pytest

from reshader.errors import FileSystemError, GamePathError, SymlinkConflictError
from reshader.install import (
    install_presets,
    install_presets_for_game,
    install_reshade,
    install_reshade_shaders,
    uninstall,
)


def test_install_reshade_links_files(data_dir: Path, game_dir: Path) -> None:
    install_reshade(data_dir, game_dir, vanilla=False)

    assert (game_dir / "dxgi.dll").is_symlink()
    assert os.readlink(game_dir / "dxgi.dll") == str(data_dir / "ReShade64.Addon.dll")
    assert os.readlink(game_dir / "d3dcompiler_47.dll") == str(data_dir / "d3dcompiler_47.dll")
    assert "[GENERAL]" in (game_dir / "ReShade.ini").read_text()


def test_install_reshade_twice_is_idempotent(data_dir: Path, game_dir: Path) -> None:
    install_reshade(data_dir, game_dir, vanilla=True)
    first = os.readlink(game_dir / "dxgi.dll")

    install_reshade(data_dir, game_dir, vanilla=True)

    assert os.readlink(game_dir / "dxgi.dll") == first == str(data_dir / "ReShade64.Vanilla.dll")


def test_install_reshade_switches_variant(data_dir: Path, game_dir: Path) -> None:
    install_reshade(data_dir, game_dir, vanilla=True)
    install_reshade(data_dir, game_dir, vanilla=False)

    assert (game_dir / "dxgi.dll").read_bytes() == b"addon"


def test_install_reshade_refuses_plain_loader(data_dir: Path, game_dir: Path) -> None:
    (game_dir / "dxgi.dll").write_bytes(b"original")

    with pytest.raises(SymlinkConflictError):
        install_reshade(data_dir, game_dir, vanilla=False)

    assert not (game_dir / "dxgi.dll").is_symlink()
    assert (game_dir / "dxgi.dll").read_bytes() == b"original"
    assert not (game_dir / "d3dcompiler_47.dll").exists()


def test_install_reshade_keeps_existing_ini(data_dir: Path, game_dir: Path) -> None:
    (game_dir / "ReShade.ini").write_text("[GENERAL]\nmine=1\n")

    install_reshade(data_dir, game_dir, vanilla=False)

    assert (game_dir / "ReShade.ini").read_text() == "[GENERAL]\nmine=1\n"


def test_install_reshade_missing_game(data_dir: Path, tmp_path: Path) -> None:
    with pytest.raises(GamePathError):
        install_reshade(data_dir, tmp_path / "nope", vanilla=False)


def test_install_reshade_before_download(tmp_path: Path, game_dir: Path) -> None:
    with pytest.raises(FileSystemError):
        install_reshade(tmp_path / "empty", game_dir, vanilla=False)
    assert list(game_dir.iterdir()) == []


def test_install_reshade_shaders(data_dir: Path, game_dir: Path) -> None:
    (data_dir / "Merged" / "Shaders").mkdir(parents=True)

    install_reshade_shaders(data_dir, game_dir)
    install_reshade_shaders(data_dir, game_dir)

    assert os.readlink(game_dir / "reshade-shaders") == str(data_dir / "Merged")


def test_install_reshade_shaders_conflict(data_dir: Path, game_dir: Path) -> None:
    (data_dir / "Merged").mkdir()
    (game_dir / "reshade-shaders").mkdir()

    with pytest.raises(SymlinkConflictError):
        install_reshade_shaders(data_dir, game_dir)
    assert not (game_dir / "reshade-shaders").is_symlink()


def test_existing_shader_symlink_is_left_alone(data_dir: Path, game_dir: Path, tmp_path: Path) -> None:
    (data_dir / "Merged").mkdir()
    elsewhere = tmp_path / "custom-shaders"
    elsewhere.mkdir()
    (game_dir / "reshade-shaders").symlink_to(elsewhere)

    install_reshade_shaders(data_dir, game_dir)

    assert os.readlink(game_dir / "reshade-shaders") == str(elsewhere)


def test_install_presets_from_archives(data_dir: Path, tmp_path: Path, make_zip) -> None:
    presets_zip = tmp_path / "presets.zip"
    presets_zip.write_bytes(make_zip({"GShade-Presets-master/Custom/Sunset.ini": b"preset"}))
    shaders_zip = tmp_path / "shaders.zip"
    shaders_zip.write_bytes(make_zip({
        "gshade-shaders/Shaders/Bloom.fx": b"bloom",
        "gshade-shaders/Textures/Dirt.png": b"dirt",
    }))

    install_presets(data_dir, presets_zip, shaders_zip)

    assert (data_dir / "reshade-presets" / "Custom" / "Sunset.ini").read_bytes() == b"preset"
    assert (data_dir / "reshade-shaders" / "Shaders" / "Bloom.fx").read_bytes() == b"bloom"
    assert (data_dir / "reshade-shaders" / "Textures" / "Dirt.png").read_bytes() == b"dirt"
    assert (data_dir / "reshade-shaders" / "Intermediate").is_dir()
    assert not (data_dir / "GShade-Presets-master").exists()


def test_install_presets_for_game(data_dir: Path, game_dir: Path) -> None:
    (data_dir / "reshade-presets").mkdir()
    (data_dir / "reshade-shaders").mkdir()

    install_presets_for_game(data_dir, game_dir)
    install_presets_for_game(data_dir, game_dir)

    assert os.readlink(game_dir / "gshade-presets") == str(data_dir / "reshade-presets")
    assert os.readlink(game_dir / "gshade-shaders") == str(data_dir / "reshade-shaders")


def test_install_presets_for_game_conflict(data_dir: Path, game_dir: Path) -> None:
    (data_dir / "reshade-presets").mkdir()
    (data_dir / "reshade-shaders").mkdir()
    (game_dir / "gshade-shaders").mkdir()

    with pytest.raises(SymlinkConflictError):
        install_presets_for_game(data_dir, game_dir)
    assert not (game_dir / "gshade-presets").exists()


def test_uninstall_without_assets(game_dir: Path) -> None:
    (game_dir / "Game.exe").write_bytes(b"exe")

    assert uninstall(game_dir) == []
    assert sorted(p.name for p in game_dir.iterdir()) == ["Game.exe"]


def test_uninstall_removes_everything(data_dir: Path, game_dir: Path) -> None:
    (data_dir / "Merged" / "Shaders").mkdir(parents=True)
    (data_dir / "Merged" / "Shaders" / "Bloom.fx").write_bytes(b"bloom")
    (data_dir / "reshade-presets").mkdir()
    (data_dir / "reshade-shaders").mkdir()
    install_reshade(data_dir, game_dir, vanilla=False)
    install_reshade_shaders(data_dir, game_dir)
    install_presets_for_game(data_dir, game_dir)
    (game_dir / "reshade-presets").mkdir()
    (game_dir / "reshade-presets" / "Old.ini").write_text("old")

    removed = uninstall(game_dir)

    assert sorted(removed) == sorted([
        "dxgi.dll", "d3dcompiler_47.dll", "reshade-presets",
        "gshade-presets", "reshade-shaders", "gshade-shaders",
    ])
    assert sorted(p.name for p in game_dir.iterdir()) == ["ReShade.ini"]
    # Links are removed without following them into the shared data.
    assert (data_dir / "Merged" / "Shaders" / "Bloom.fx").read_bytes() == b"bloom"
    assert (data_dir / "ReShade64.Addon.dll").exists()


def test_uninstall_plain_loader_file(game_dir: Path) -> None:
    (game_dir / "dxgi.dll").write_bytes(b"old copy")

    assert uninstall(game_dir) == ["dxgi.dll"]
    assert not (game_dir / "dxgi.dll").exists()
