from __future__ import annotations

"""Static configuration for the draft board service.

Paths and tunables are read from the environment once at import time.
The team directory is static.
"""

import os
from typing import Dict, List, Tuple

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

DATA_DIR = os.environ.get("DRAFT_DATA_DIR") or os.path.join(BASE_DIR, "data")
LEDGER_DIR = os.environ.get("DRAFT_LEDGER_DIR") or os.path.join(DATA_DIR, "draft_picks")
STANDINGS_PATH = os.environ.get("DRAFT_STANDINGS_PATH") or os.path.join(DATA_DIR, "standings.json")

# The upcoming draft. Complex-case resolvers only apply to this year.
CURRENT_DRAFT_YEAR: int = int(os.environ.get("CURRENT_DRAFT_YEAR") or 2026)

DRAFT_ROUNDS: int = int(os.environ.get("DRAFT_ROUNDS") or 2)

# Resolved boards are recomputed at most once per TTL per standings snapshot.
BOARD_CACHE_TTL_SEC: float = float(os.environ.get("BOARD_CACHE_TTL_SEC") or 3600)
BOARD_CACHE_MAX_ENTRIES: int = int(os.environ.get("BOARD_CACHE_MAX_ENTRIES") or 64)

# team_id -> (abbreviation, nickname, full name)
TEAM_DIRECTORY: Dict[str, Tuple[str, str, str]] = {
    "ATL": ("ATL", "Hawks", "Atlanta Hawks"),
    "BOS": ("BOS", "Celtics", "Boston Celtics"),
    "BKN": ("BKN", "Nets", "Brooklyn Nets"),
    "CHA": ("CHA", "Hornets", "Charlotte Hornets"),
    "CHI": ("CHI", "Bulls", "Chicago Bulls"),
    "CLE": ("CLE", "Cavaliers", "Cleveland Cavaliers"),
    "DAL": ("DAL", "Mavericks", "Dallas Mavericks"),
    "DEN": ("DEN", "Nuggets", "Denver Nuggets"),
    "DET": ("DET", "Pistons", "Detroit Pistons"),
    "GSW": ("GSW", "Warriors", "Golden State Warriors"),
    "HOU": ("HOU", "Rockets", "Houston Rockets"),
    "IND": ("IND", "Pacers", "Indiana Pacers"),
    "LAC": ("LAC", "Clippers", "Los Angeles Clippers"),
    "LAL": ("LAL", "Lakers", "Los Angeles Lakers"),
    "MEM": ("MEM", "Grizzlies", "Memphis Grizzlies"),
    "MIA": ("MIA", "Heat", "Miami Heat"),
    "MIL": ("MIL", "Bucks", "Milwaukee Bucks"),
    "MIN": ("MIN", "Timberwolves", "Minnesota Timberwolves"),
    "NOP": ("NOP", "Pelicans", "New Orleans Pelicans"),
    "NYK": ("NYK", "Knicks", "New York Knicks"),
    "OKC": ("OKC", "Thunder", "Oklahoma City Thunder"),
    "ORL": ("ORL", "Magic", "Orlando Magic"),
    "PHI": ("PHI", "76ers", "Philadelphia 76ers"),
    "PHX": ("PHX", "Suns", "Phoenix Suns"),
    "POR": ("POR", "Trail Blazers", "Portland Trail Blazers"),
    "SAC": ("SAC", "Kings", "Sacramento Kings"),
    "SAS": ("SAS", "Spurs", "San Antonio Spurs"),
    "TOR": ("TOR", "Raptors", "Toronto Raptors"),
    "UTA": ("UTA", "Jazz", "Utah Jazz"),
    "WAS": ("WAS", "Wizards", "Washington Wizards"),
}

ALL_TEAM_IDS: List[str] = list(TEAM_DIRECTORY.keys())
