"""Game launcher catalog: a JSON file seeded with the default set on first read."""

import json
import logging
import os
from pathlib import Path

from pydantic import TypeAdapter

from lounge.schemas.game import Game

logger = logging.getLogger(__name__)

_GH = "https://games-site.github.io/projects"
_BIN = "https://gamingshitposting.github.io/ext-bin-1"

DEFAULT_GAMES: list[dict] = [
    {"id": "mario", "name": "Super Mario", "url": f"{_GH}/mario/index.html", "desc": "The classic platforming adventure."},
    {"id": "paperio", "name": "Paper.io 2", "url": f"{_GH}/paperio2/index.html", "desc": "Conquer as much territory as possible."},
    {"id": "pacman", "name": "Pac-Man", "url": f"{_GH}/pacman/index.html", "desc": "Navigate the maze and eat the dots."},
    {"id": "ballsort", "name": "Ball Sort Puzzle", "url": f"{_GH}/ball-sort-puzzle/index.html", "desc": "Sort the colored balls in the tubes."},
    {"id": "cookie", "name": "Cookie Clicker", "url": f"{_GH}/cookie-clicker/index.html", "desc": "Bake an infinite amount of cookies."},
    {"id": "coreball", "name": "Core Ball", "url": f"{_GH}/core-ball/index.html", "desc": "Test your timing and precision."},
    {"id": "deathrun", "name": "Death Run 3D", "url": f"{_GH}/death-run-3d/index.html", "desc": "Fast-paced tube runner."},
    {"id": "drifthunters", "name": "Drift Hunters", "url": f"{_GH}/drift-hunters/index.html", "desc": "Detailed 3D drifting simulator."},
    {"id": "alc2", "name": "Little Alchemy 2", "url": f"{_BIN}/littlealchemy2.com/index.html", "desc": "Mix elements and create the world."},
    {
        "id": "totm",
        "name": "Tomb of the Mask",
        "url": f"{_BIN}/web-portal-testing.pg.io/4yuEwaHwXK74EMazDK9Z7rl32xa9w0Pf/totm/latest/index.html",
        "desc": "Explore a vertical labyrinth.",
    },
    {
        "id": "eagler",
        "name": "Eaglercraft 1.8",
        "url": f"{_BIN}/games/EaglercraftX_1.8_u27_Offline_Signed.html",
        "desc": "Browser-based voxel survival.",
    },
    {"id": "stack", "name": "Stack", "url": f"{_BIN}/games/stack/index.html", "desc": "Stack blocks to reach the sky."},
    {"id": "alc1", "name": "Little Alchemy", "url": "https://sciencemathedu.github.io/littlealchemy/", "desc": "Original element logic game."},
    {"id": "2048", "name": "2048", "url": f"{_GH}/2048/index.html", "desc": "Slide tiles to reach 2048."},
    {"id": "bitlife", "name": "BitLife", "url": f"{_GH}/bitlife/index.html", "desc": "Simulate an entire life."},
    {"id": "doodle", "name": "Doodle Jump", "url": f"{_GH}/doodle-jump/index.html", "desc": "Classic endless jumper."},
    {"id": "drift-boss", "name": "Drift Boss", "url": f"{_GH}/drift-boss/index.html", "desc": "Drifting car physics game."},
    {"id": "flappy", "name": "Flappy Bird", "url": f"{_GH}/flappy-bird/index.html", "desc": "Fly through the pipes."},
    {"id": "feud", "name": "Google Feud", "url": f"{_GH}/google-feud/index.html", "desc": "Autocomplete guessing game."},
    {"id": "mines", "name": "Minesweeper", "url": f"{_GH}/minesweeper/index.html", "desc": "Classic logic mine-clearing."},
    {"id": "doge", "name": "Save the Doge", "url": f"{_GH}/save-the-doge/index.html", "desc": "Protect the doge from bees."},
]

_games_adapter = TypeAdapter(list[Game])


def ensure_catalog(path: str) -> None:
    """Write the default catalog to *path* unless a file is already there."""
    if os.path.exists(path):
        return
    os.makedirs(Path(path).parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(DEFAULT_GAMES, fh, indent=2)
    logger.info("Seeded game catalog at %s (%d games)", path, len(DEFAULT_GAMES))


def load_games(path: str) -> list[Game]:
    """Read and validate the catalog. Raises OSError / ValueError on a bad file."""
    with open(path, encoding="utf-8") as fh:
        return _games_adapter.validate_json(fh.read())
