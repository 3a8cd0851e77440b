"""
Command line entry point and interactive session.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

import argparse
import logging
import sys
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

import questionary
import requests
from rich.logging import RichHandler

from reshader import __version__, ui
from reshader.config import CONFIG_FILE, Config, load_config, save_config, setup_directories
from reshader.constants import GSHADE_DOWNLOADS_URL, SHADER_SOURCES
from reshader.download import create_session, download_reshade
from reshader.errors import ConfigError, ReShaderError
from reshader.executables import compatibility_warnings
from reshader.install import (
    install_presets,
    install_presets_for_game,
    install_reshade,
    install_reshade_shaders,
    uninstall,
)
from reshader.shaders import (
    default_collections,
    load_collections,
    merged_dir,
    select_collections,
    sync_collections,
    sync_repositories,
)
from reshader.ui import console

logger = logging.getLogger(__name__)

PRESETS_ZIP = "presets.zip"
SHADERS_ZIP = "shaders.zip"


# =============================================================================
# Argument parsing & logging
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reshader",
        description="Install ReShade and GShade presets for games on Linux.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-u", "--use-installer",
        type=Path,
        help="Use a specific ReShade installer at this path instead of downloading one",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command")

    reshade = commands.add_parser(
        "install-reshade",
        help="Install ReShade for a game (only downloads it if no game is given)",
    )
    reshade.add_argument(
        "--vanilla", action="store_true",
        help="Install a version of ReShade that has no support for addons",
    )
    reshade.add_argument("-v", "--version", dest="reshade_version", help="ReShade version (default: latest)")
    reshade.add_argument("-g", "--game", type=Path, help="Game directory to install ReShade into")

    shaders = commands.add_parser(
        "install-shaders",
        help="Download and merge ReShade shaders, optionally linking them into games",
    )
    shaders.add_argument("-a", "--all", action="store_true", help="Install the shaders for all managed games")
    shaders.add_argument("-g", "--game", type=Path, help="Install the shaders for this game")
    shaders.add_argument(
        "--git", action="store_true",
        help="Clone the shader git repositories instead of downloading shader collections",
    )
    shaders.add_argument(
        "-c", "--collection", action="append", default=[], metavar="NAME",
        help="Shader collection to install (repeatable, default: the enabled collections)",
    )

    presets = commands.add_parser(
        "install-presets",
        help="Install GShade presets and shaders from downloaded archives",
    )
    presets.add_argument("-a", "--all", action="store_true", help="Install the presets for all managed games")
    presets.add_argument("-g", "--game", type=Path, help="Install the presets for this game")
    presets.add_argument("-p", "--presets", type=Path, required=True, help="GShade presets zip file")
    presets.add_argument("-s", "--shaders", type=Path, required=True, help="GShade shaders zip file")

    remove = commands.add_parser("uninstall", help="Uninstall ReShade or GShade from a game")
    remove.add_argument("-g", "--game", type=Path, required=True, help="Uninstall from this game")

    return parser


def setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug)],
    )
    logging.getLogger().setLevel(level)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# =============================================================================
# Session
# =============================================================================

@dataclass
class Session:
    """State shared by every action of one run."""
    config: Config
    config_path: Path
    data_dir: Path
    http: requests.Session
    installer: Optional[Path] = None

    def save(self) -> bool:
        """Persist the managed game list. Returns False if writing failed."""
        try:
            save_config(self.config, self.config_path)
        except ReShaderError as e:
            ui.print_error(e)
            return False
        return True


def _resolve(game_path: Path) -> Path:
    return game_path.expanduser().resolve()


def _warn_compatibility(game_path: Path) -> None:
    for warning in compatibility_warnings(game_path):
        ui.print_executable_warning(warning)


def attach_reshade(session: Session, game_path: Path, vanilla: bool) -> None:
    game_path = _resolve(game_path)
    _warn_compatibility(game_path)
    install_reshade(session.data_dir, game_path, vanilla)
    session.config.add_game(game_path)
    ui.print_reshade_success(game_path)


def _forget_game(config: Config, game_path: Path) -> None:
    """Drop every managed entry naming ``game_path``, as stored or once resolved."""
    resolved = _resolve(game_path)
    for stored in list(config.game_paths):
        if stored == str(game_path) or _resolve(Path(stored)) == resolved:
            config.remove_game(stored)


def uninstall_game(session: Session, game_path: Path) -> list[str]:
    resolved = _resolve(game_path)
    removed = uninstall(resolved)
    _forget_game(session.config, game_path)
    ui.print_uninstalled(resolved, removed)
    return removed


def _target_games(session: Session, all_games: bool, game: Optional[Path]) -> list[Path]:
    if all_games:
        return [Path(p) for p in session.config.game_paths]
    if game is not None:
        return [_resolve(game)]
    return []


# =============================================================================
# One-shot commands
# =============================================================================

def run_command(session: Session, args: argparse.Namespace) -> None:
    if args.command == "install-reshade":
        download_reshade(
            session.http, session.data_dir, args.vanilla, args.reshade_version, session.installer
        )
        if args.game is not None:
            attach_reshade(session, args.game, args.vanilla)
        else:
            ui.print_reshade_success_no_games(session.data_dir)

    elif args.command == "install-shaders":
        if args.git:
            sync_repositories(session.data_dir, SHADER_SOURCES)
        else:
            collections = load_collections()
            if args.collection:
                selected = select_collections(collections, args.collection)
            else:
                selected = default_collections(collections)
            sync_collections(session.http, session.data_dir, selected)

        games = _target_games(session, args.all, args.game)
        for game_path in games:
            install_reshade_shaders(session.data_dir, game_path)
        if games:
            ui.print_shaders_success()
        else:
            ui.print_shaders_success_no_games(merged_dir(session.data_dir))

    elif args.command == "install-presets":
        install_presets(session.data_dir, args.presets, args.shaders)

        games = _target_games(session, args.all, args.game)
        for game_path in games:
            install_presets_for_game(session.data_dir, game_path)
        if games:
            ui.print_presets_success()
        else:
            ui.print_presets_success_no_games(session.data_dir)

    elif args.command == "uninstall":
        uninstall_game(session, args.game)


# =============================================================================
# Interactive flows
# =============================================================================

MENU_CHOICES = (
    ("Install/Update ReShade (with addon support, recommended)", "reshade"),
    ("Install/Update ReShade (vanilla)", "reshade_vanilla"),
    ("Install/Update ReShade shaders", "shaders"),
    ("Install/Update GShade shaders and presets (install ReShade first)", "presets"),
    ("Uninstall ReShade/GShade", "uninstall"),
    ("Quit", "quit"),
)


def main_menu() -> Optional[str]:
    choices = [questionary.Choice(title, value=value) for title, value in MENU_CHOICES]
    return ui.ask_select("Select an option", choices)


def run_reshade_flow(session: Session, vanilla: bool) -> None:
    download_reshade(session.http, session.data_dir, vanilla, installer=session.installer)

    if not ui.ask_confirm("Do you want to install ReShade now?"):
        ui.print_reshade_success_no_games(session.data_dir)
        return

    game_path = ui.ask_game_path()
    if game_path is None:
        return
    attach_reshade(session, game_path, vanilla)


def run_shaders_flow(session: Session) -> None:
    strategy = ui.ask_select("Where should the shaders come from?", [
        questionary.Choice("Shader collections (recommended)", value="collections"),
        questionary.Choice("Git repositories", value="git"),
        questionary.Choice("[Cancel]", value=None),
    ])
    if strategy is None:
        return

    if strategy == "git":
        choices = [
            questionary.Choice(title=source.name, value=source, checked=True)
            for source in SHADER_SOURCES
        ]
        sources = ui.ask_checkbox("Select shader repositories to install:", choices)
        if not sources:
            return
        sync_repositories(session.data_dir, sources)
    else:
        collections = load_collections()
        choices = [
            questionary.Choice(
                title=f"{c.name} - {c.description}" + (" (required)" if c.required else ""),
                value=c.name,
                checked=c.enabled or c.required,
            )
            for c in collections
        ]
        names = ui.ask_checkbox("Select shader collections to install:", choices)
        if not names:
            return
        sync_collections(session.http, session.data_dir, select_collections(collections, names))

    if not session.config.game_paths or not ui.ask_confirm("Do you want to install the shaders now?"):
        ui.print_shaders_success_no_games(merged_dir(session.data_dir))
        return

    games = ui.ask_game_paths("Select the games you want to install the shaders for", session.config.game_paths)
    for game_path in games:
        install_reshade_shaders(session.data_dir, game_path)
    ui.print_shaders_success()


def run_presets_flow(session: Session) -> None:
    ui.print_gshade_warning()

    if ui.ask_confirm("Do you want to open the download links now?"):
        ui.print_gshade_file_move(session.data_dir)
        webbrowser.open(GSHADE_DOWNLOADS_URL)
        ui.print_gshade_hint()

    if not ui.ask_confirm("Have you downloaded the files and put them in the correct directory?"):
        return

    install_presets(session.data_dir, session.data_dir / PRESETS_ZIP, session.data_dir / SHADERS_ZIP)

    if not session.config.game_paths or not ui.ask_confirm(
        "Do you want to install the presets and shaders for games now?"
    ):
        ui.print_presets_success_no_games(session.data_dir)
        return

    games = ui.ask_game_paths(
        "Select the games you want to install the shaders and presets for", session.config.game_paths
    )
    for game_path in games:
        install_presets_for_game(session.data_dir, game_path)
    ui.print_presets_success()


def run_uninstall_flow(session: Session) -> None:
    if not session.config.game_paths:
        ui.print_no_game_paths()
        return

    game_path = ui.ask_game_path_from(
        "Select the game you want to uninstall ReShade from", session.config.game_paths
    )
    if game_path is None:
        return
    if ui.ask_confirm(f"Uninstall ReShade from {game_path}?"):
        uninstall_game(session, game_path)


FLOWS = {
    "reshade": lambda session: run_reshade_flow(session, vanilla=False),
    "reshade_vanilla": lambda session: run_reshade_flow(session, vanilla=True),
    "shaders": run_shaders_flow,
    "presets": run_presets_flow,
    "uninstall": run_uninstall_flow,
}


def run_interactive(session: Session) -> None:
    """Main menu loop. Errors are reported and the menu is shown again."""
    ui.display_banner()

    while True:
        console.print()
        action = main_menu()

        if action == "quit" or action is None:
            console.print("[cyan]Goodbye![/]")
            break

        try:
            FLOWS[action](session)
        except ReShaderError as e:
            logger.debug("Action %s failed", action, exc_info=True)
            ui.print_error(e)
        session.save()


# =============================================================================
# Entry point
# =============================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    if not sys.platform.startswith("linux"):
        console.print("[bold red]This installer is only supported on Linux[/]")
        return 1

    try:
        data_dir, config_dir = setup_directories()
        config_path = config_dir / CONFIG_FILE
        config = load_config(config_path)
    except ConfigError as e:
        ui.print_config_deserialization_error(e)
        return 1
    except ReShaderError as e:
        ui.print_error(e)
        return 1

    session = Session(
        config=config,
        config_path=config_path,
        data_dir=data_dir,
        http=create_session(),
        installer=args.use_installer.expanduser() if args.use_installer else None,
    )

    if args.command is None:
        try:
            run_interactive(session)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/]")
        return 0

    status = 0
    try:
        run_command(session, args)
    except ReShaderError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        ui.print_error(e)
        status = 1

    if not session.save():
        status = 1
    return status


if __name__ == "__main__":
    sys.exit(main())
