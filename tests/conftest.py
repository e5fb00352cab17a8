"""
Shared pytest fixtures for Americano scheduler tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - fast subset
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
sys.path.insert(0, os.path.dirname(__file__))

from schedule_helpers import make_roster


@pytest.fixture
def roster_factory():
    return make_roster


@pytest.fixture
def roster_8():
    return make_roster(8)


@pytest.fixture
def roster_12():
    return make_roster(12)


@pytest.fixture
def roster_16():
    return make_roster(16)


@pytest.fixture
def temp_games_dir(tmp_path, monkeypatch):
    """Point the game store at a temporary directory."""
    import app as app_module

    data_dir = tmp_path / "data"
    games_dir = data_dir / "games"
    games_dir.mkdir(parents=True)
    monkeypatch.setattr(app_module, 'DATA_DIR', str(data_dir))
    monkeypatch.setattr(app_module, 'GAMES_DIR', str(games_dir))
    return str(games_dir)


@pytest.fixture
def client(temp_games_dir):
    """Create a test client bound to the temporary store."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
