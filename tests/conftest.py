import os
import sys
import pytest

# Ensure the project root (containing the modules under test) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from fastapi.testclient import TestClient

import globals
from cricket_api import app
from game_logic import MatchConfig, MatchSession


def play(session, *darts):
    """Record each (target, multiplier) dart; return the last snapshot."""
    snapshot = None
    for target, multiplier in darts:
        snapshot = session.record_throw(target, multiplier)
    return snapshot


def next_turn(session, *darts):
    session.switch_player()
    return play(session, *darts)


@pytest.fixture()
def standard_session():
    return MatchSession(MatchConfig(variant="standard", total_legs=3))


@pytest.fixture()
def super_session():
    return MatchSession(MatchConfig(variant="super", total_legs=3))


@pytest.fixture()
def client():
    globals.current_session = None
    with TestClient(app) as test_client:
        yield test_client
    globals.current_session = None
