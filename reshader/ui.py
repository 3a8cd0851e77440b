"""
Console output and interactive prompts.

Copyright (C) 2021-2024 kevinlekiller, modernized by contributors

This program is free software; you can redistribute it and/or modify it under
the terms of the GNU General Public License as published by the Free Software
Foundation; either version 2 of the License, or (at your option) any later version.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import questionary
from questionary import Style
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from reshader.constants import GSHADE_DOWNLOADS_URL

console = Console()

QUESTIONARY_STYLE = Style([
    ("qmark", "fg:cyan bold"),
    ("question", "fg:white bold"),
    ("answer", "fg:green bold"),
    ("pointer", "fg:cyan bold"),
    ("highlighted", "fg:cyan bold"),
    ("selected", "fg:green"),
    ("separator", "fg:gray"),
    ("instruction", "fg:gray italic"),
])

DEFAULT_GAME_PATH = "~/.xlcore/ffxiv/game"


# =============================================================================
# Prompts
# =============================================================================

def ask_select(message: str, choices: list):
    """Wrapper for questionary select with consistent styling."""
    return questionary.select(message, choices=choices, style=QUESTIONARY_STYLE).ask()


def ask_checkbox(message: str, choices: list) -> list:
    result = questionary.checkbox(message, choices=choices, style=QUESTIONARY_STYLE).ask()
    return result or []


def ask_confirm(message: str, default: bool = True) -> bool:
    """Wrapper for questionary confirm with consistent styling."""
    result = questionary.confirm(message, default=default, style=QUESTIONARY_STYLE).ask()
    return result if result is not None else False


def _validate_game_path(value: str) -> bool | str:
    if not value:
        return "Please enter a path!"
    if not Path(value).expanduser().is_dir():
        return "The path you entered does not exist!"
    return True


def ask_game_path() -> Optional[Path]:
    """Ask for the folder containing the game executable."""
    result = questionary.path(
        "Enter the path to your ReShade-supported game:",
        default=DEFAULT_GAME_PATH,
        only_directories=True,
        validate=_validate_game_path,
        style=QUESTIONARY_STYLE,
    ).ask()
    if not result:
        return None
    return Path(result).expanduser()


def ask_game_paths(message: str, game_paths: list[str]) -> list[Path]:
    """Let the user pick any number of managed games."""
    choices = [questionary.Choice(title=p, value=p, checked=True) for p in game_paths]
    return [Path(p).expanduser() for p in ask_checkbox(message, choices)]


def ask_game_path_from(message: str, game_paths: list[str]) -> Optional[Path]:
    choices = [questionary.Choice(title=p, value=p) for p in game_paths]
    choices.append(questionary.Choice(title="[Cancel]", value=None))
    result = ask_select(message, choices)
    return Path(result).expanduser() if result else None


# =============================================================================
# Messages
# =============================================================================

def display_banner() -> None:
    banner = """
 ____      ____  _               _
|  _ \\ ___/ ___|| |__   __ _  __| | ___ _ __
| |_) / _ \\___ \\| '_ \\ / _` |/ _` |/ _ \\ '__|
|  _ <  __/___) | | | | (_| | (_| |  __/ |
|_| \\_\\___|____/|_| |_|\\__,_|\\__,_|\\___|_|"""

    console.print(Panel(
        Text(banner, style="bold cyan", justify="center"),
        subtitle="[dim]ReShade and GShade installer for Linux[/]",
        box=box.DOUBLE,
    ))


def print_error(error: Exception) -> None:
    console.print(f"\n[bold red]An error occurred: {error}[/]\n")


def print_reshade_success(game_path: Path) -> None:
    console.print(Panel(
        f"""[bold green]ReShade installed successfully![/]

[cyan]Game:[/] {game_path}

Please restart your game to enable it.
[yellow]Note that this installation did not install any presets or shaders![/]

[yellow]Launch options (Wine/Proton):[/]
[bold]WINEDLLOVERRIDES="d3dcompiler_47=n;dxgi=n,b" %command%[/]""",
        title="Success",
        box=box.ROUNDED,
    ))


def print_reshade_success_no_games(data_dir: Path) -> None:
    console.print(f"\n[bold green]Installation complete! ReShade is located at [white]{data_dir}[/].[/]")
    console.print(
        "[green]In order to install it for your game, re-run this installer and provide a game path.[/]\n"
    )


def print_shaders_success() -> None:
    console.print("\n[bold green]Successfully installed ReShade shaders![/]\n")


def print_shaders_success_no_games(merged_dir: Path) -> None:
    console.print(f"\n[bold green]Shaders downloaded and merged into [white]{merged_dir}[/].[/]")
    console.print("[green]To install them, run this option again and select a game![/]\n")


def print_gshade_warning() -> None:
    console.print()
    console.print(
        "[cyan]As it is not allowed to redistribute or automatically download presets and shaders, "
        "you will have to download them manually.[/]"
    )
    console.print(
        "[cyan]ReShader can open your browser and take you to the correct links "
        "for you to download these files yourself.[/]"
    )
    console.print(
        "[yellow]GPosers might take down the download links at any time, "
        "so you might have to find the files yourself.[/]\n"
    )


def print_gshade_file_move(data_dir: Path) -> None:
    console.print(
        f"\n[cyan]After you have downloaded the files, put them in the [bold white]{data_dir}[/] "
        'directory, named "shaders.zip" and "presets.zip".[/]\n'
    )


def print_gshade_hint() -> None:
    console.print("\n[cyan]If your browser does not open, please open the following link manually:[/]")
    console.print(f"[bold white]{GSHADE_DOWNLOADS_URL}[/]\n")


def print_presets_success() -> None:
    console.print(Panel(
        """[bold green]Installation complete! You now need to configure your ReShade as follows:[/]

  Set your "effect search path" to "./gshade-shaders/Shaders" and "./gshade-shaders/ComputeShaders"
  Set your "textures search path" to "./gshade-shaders/Textures"
  GShade presets are in the game's "gshade-presets" directory; browse to them in the ReShade UI.""",
        title="Success",
        box=box.ROUNDED,
    ))


def print_presets_success_no_games(data_dir: Path) -> None:
    console.print(
        f"\n[bold green]Installation complete! GShade's presets and shaders are located at [white]{data_dir}[/].[/]"
    )
    console.print(
        "[green]Configure ReShade to include the shaders folder as the effect and texture search path "
        "(Shaders and ComputeShaders for effects, Textures for textures).[/]\n"
    )


def print_uninstalled(game_path: Path, removed: list[str]) -> None:
    if removed:
        console.print(f"[green]Removed from {game_path}: {', '.join(removed)}[/]")
    else:
        console.print(f"[yellow]No ReShade files found in {game_path}[/]")
    console.print("[yellow]Remember to remove the WINEDLLOVERRIDES from your launch options![/]")


def print_no_game_paths() -> None:
    console.print("\n[bold red]No game paths with an installed ReShade or GShade found.[/]\n")


def print_config_deserialization_error(error: Exception) -> None:
    console.print(f"\n[bold red]{error}[/]")
    console.print("[red]Please make sure the configuration file is valid and try again.[/]\n")


def print_executable_warning(message: str) -> None:
    console.print(f"[yellow]{message}[/]")
