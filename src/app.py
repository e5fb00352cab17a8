"""
Flask JSON service for sharing Americano games.

Games are stored as YAML documents, one per game, and can be read by anyone
with the id. Changing scores, adding rounds and deleting a game need the
PIN handed out at creation; the kiosk player endpoint does not.
"""
import os
import re
import secrets
import string
import uuid
import yaml
from datetime import datetime, timedelta
from functools import wraps
from filelock import FileLock
from flask import Flask, request, jsonify, g
from werkzeug.security import generate_password_hash, check_password_hash
from core.models import Participant, Tournament, MODE_CLASSIC, MODE_EVENT, SKILL_LEVELS
from core.scheduler import (
    generate_schedule,
    generate_additional_round,
    generate_championship_round,
    generate_event_round,
    is_balanced_roster_size,
    MIN_PARTICIPANTS,
)
from core.standings import calculate_standings

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('AMERICANO_DATA_DIR', os.path.join(BASE_DIR, 'data'))
GAMES_DIR = os.path.join(DATA_DIR, 'games')

app.config['GAME_TTL_SECONDS'] = int(os.environ.get('GAME_TTL_SECONDS', 24 * 60 * 60))
app.config['DEFAULT_NUM_COURTS'] = int(os.environ.get('DEFAULT_NUM_COURTS', 2))

GAME_ID_LENGTH = 6
GAME_ID_CHARS = string.ascii_lowercase + string.digits
PIN_HEADER = 'X-Tournament-Pin'
MAX_SCORE = 99
_GAME_ID_RE = re.compile(r'^[a-z0-9]+$')


def generate_game_id() -> str:
    return ''.join(secrets.choice(GAME_ID_CHARS) for _ in range(GAME_ID_LENGTH))


def generate_pin() -> str:
    return str(1000 + secrets.randbelow(9000))


def _game_path(game_id: str) -> str:
    return os.path.join(GAMES_DIR, f'{game_id}.yaml')


def _games_lock() -> FileLock:
    os.makedirs(GAMES_DIR, exist_ok=True)
    return FileLock(os.path.join(GAMES_DIR, '.lock'), timeout=10)


def load_game(game_id: str):
    """
    Load a stored game document, or None when missing, unreadable or expired.

    Expired games are removed, so callers must hold _games_lock().
    """
    if not _GAME_ID_RE.match(game_id or ''):
        return None
    path = _game_path(game_id)
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return None
    if not data or 'tournament' not in data:
        return None
    if datetime.fromisoformat(data['expires_at']) <= datetime.now():
        app.logger.info(f'Game {game_id} expired, removing')
        os.remove(path)
        return None
    return data


def save_game(data: dict):
    """Save a game document to YAML."""
    os.makedirs(GAMES_DIR, exist_ok=True)
    try:
        with open(_game_path(data['id']), 'w', encoding='utf-8') as f:
            yaml.dump(data, f, default_flow_style=False)
    except OSError as e:
        app.logger.error(f'Failed to save game {data["id"]}: {e}')
        raise


def delete_game(game_id: str):
    path = _game_path(game_id)
    if os.path.exists(path):
        os.remove(path)


def _public_payload(data: dict) -> dict:
    """Game document without the PIN hash."""
    tournament = data['tournament']
    return {
        'id': data['id'],
        'tournament': tournament,
        'balanced': is_balanced_roster_size(len(tournament.get('participants', []))),
        'created_at': data['created_at'],
        'expires_at': data['expires_at'],
    }


def _error(message: str, status: int):
    return jsonify({'success': False, 'error': message}), status


def pin_required(f):
    """Load the game into g.game and check the PIN header against it."""
    @wraps(f)
    def decorated_function(game_id, *args, **kwargs):
        pin = request.headers.get(PIN_HEADER)
        if not pin:
            return _error('PIN is required', 401)
        with _games_lock():
            data = load_game(game_id)
            if not data:
                return _error('Tournament not found', 404)
            if not check_password_hash(data['pin_hash'], pin):
                app.logger.warning(f'Rejected PIN for game {game_id}')
                return _error('Invalid PIN', 403)
            g.game = data
            return f(game_id, *args, **kwargs)
    return decorated_function


def _participant_from_payload(entry, mode: str) -> Participant:
    if isinstance(entry, str):
        entry = {'name': entry}
    name = str(entry.get('name', '')).strip()
    if not name:
        raise ValueError('Participant name is required')
    skill_level = entry.get('skill_level') or None
    if skill_level is not None and skill_level not in SKILL_LEVELS:
        raise ValueError(f'Skill level must be one of: {", ".join(SKILL_LEVELS)}')
    return Participant(
        id=entry.get('id') or uuid.uuid4().hex,
        name=name,
        nickname=entry.get('nickname'),
        skill_level=skill_level,
        prize_exempt=bool(entry.get('prize_exempt', False)),
        is_active=entry.get('is_active', True) if mode == MODE_EVENT else None,
    )


def _parse_score(value):
    if value is None or value == '':
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError('Scores must be integers')
    if value < 0 or value > MAX_SCORE:
        raise ValueError(f'Scores must be between 0 and {MAX_SCORE}')
    return value


@app.route('/api/game', methods=['POST'])
def api_create_game():
    """Create a game from a roster; classic games get their full schedule now."""
    data = request.get_json(silent=True)
    if not data:
        return _error('No data provided', 400)

    mode = data.get('mode', MODE_CLASSIC)
    if mode not in (MODE_CLASSIC, MODE_EVENT):
        return _error('Mode must be classic or event', 400)

    try:
        participants = [_participant_from_payload(p, mode) for p in data.get('participants', [])]
    except (ValueError, AttributeError) as e:
        return _error(str(e), 400)

    names = [p.name.lower() for p in participants]
    if len(names) != len(set(names)):
        return _error('Participant names must be unique', 400)

    ids = [p.id for p in participants]
    if len(ids) != len(set(ids)):
        return _error('Participant ids must be unique', 400)

    num_courts = data.get('num_courts')
    if num_courts is not None and (not isinstance(num_courts, int) or num_courts < 1):
        return _error('Court count must be a positive integer', 400)

    if mode == MODE_CLASSIC:
        if len(participants) < MIN_PARTICIPANTS:
            return _error(f'At least {MIN_PARTICIPANTS} participants are required', 400)
        rounds = generate_schedule(participants)
    else:
        rounds = []
        if num_courts is None:
            num_courts = app.config['DEFAULT_NUM_COURTS']

    name = data.get('name') or f'Americano - {datetime.now().strftime("%Y-%m-%d")}'
    court_names = data.get('court_names') or None

    now = datetime.now()
    pin = generate_pin()
    with _games_lock():
        game_id = generate_game_id()
        while os.path.exists(_game_path(game_id)):
            game_id = generate_game_id()
        tournament = Tournament(
            id=game_id,
            name=name,
            participants=participants,
            rounds=rounds,
            mode=mode,
            court_names=court_names,
            num_courts=num_courts,
        )
        save_game({
            'id': game_id,
            'pin_hash': generate_password_hash(pin),
            'tournament': tournament.to_dict(),
            'created_at': now.isoformat(),
            'expires_at': (now + timedelta(seconds=app.config['GAME_TTL_SECONDS'])).isoformat(),
        })

    app.logger.info(f'Created {mode} game {game_id} with {len(participants)} participants, {len(rounds)} rounds')
    return jsonify({'success': True, 'id': game_id, 'pin': pin, 'share_url': f'/game/{game_id}'}), 201


@app.route('/api/game/<game_id>', methods=['GET'])
def api_get_game(game_id):
    """Public read of a game; no PIN needed."""
    with _games_lock():
        data = load_game(game_id)
    if not data:
        return _error('Tournament not found', 404)
    return jsonify(_public_payload(data))


@app.route('/api/game/<game_id>', methods=['DELETE'])
@pin_required
def api_delete_game(game_id):
    delete_game(game_id)
    app.logger.info(f'Deleted game {game_id}')
    return jsonify({'success': True})


@app.route('/api/game/<game_id>/matches/<match_id>', methods=['PUT'])
@pin_required
def api_update_score(game_id, match_id):
    """Set or clear the two scores of one match."""
    body = request.get_json(silent=True)
    if body is None:
        return _error('No data provided', 400)

    tournament = Tournament.from_dict(g.game['tournament'])
    match = tournament.find_match(match_id)
    if match is None:
        return _error('Match not found', 404)

    try:
        score_a = _parse_score(body.get('score_a'))
        score_b = _parse_score(body.get('score_b'))
    except ValueError as e:
        return _error(str(e), 400)

    match.set_score('A', score_a)
    match.set_score('B', score_b)
    g.game['tournament'] = tournament.to_dict()
    save_game(g.game)
    return jsonify({'success': True, 'match': match.to_dict()})


@app.route('/api/game/<game_id>/players', methods=['PATCH'])
def api_update_players(game_id):
    """Kiosk endpoint: toggle a participant's active flag or add a participant."""
    body = request.get_json(silent=True) or {}
    action = body.get('action')

    with _games_lock():
        data = load_game(game_id)
        if not data:
            return _error('Tournament not found', 404)
        tournament = Tournament.from_dict(data['tournament'])

        if action == 'toggle' and body.get('player_id'):
            participant = tournament.find_participant(body['player_id'])
            if participant is None:
                return _error('Player not found', 404)
            participant.is_active = not participant.active
        elif action == 'add' and body.get('player'):
            if tournament.mode != MODE_EVENT:
                return _error('Players can only be added to event games', 409)
            try:
                participant = _participant_from_payload(body['player'], MODE_EVENT)
            except (ValueError, AttributeError) as e:
                return _error(str(e), 400)
            if any(p.name.lower() == participant.name.lower() for p in tournament.participants):
                return _error('Player with this name already exists', 409)
            if tournament.find_participant(participant.id) is not None:
                return _error('Player with this id already exists', 409)
            tournament.participants.append(participant)
        else:
            return _error('Invalid action', 400)

        data['tournament'] = tournament.to_dict()
        save_game(data)

    return jsonify({'success': True, 'id': data['id'], 'tournament': data['tournament']})


@app.route('/api/game/<game_id>/rounds', methods=['POST'])
@pin_required
def api_add_round(game_id):
    """Append one round: additional, championship (top four by prize standings) or event."""
    body = request.get_json(silent=True) or {}
    tournament = Tournament.from_dict(g.game['tournament'])
    kind = body.get('kind') or (MODE_EVENT if tournament.mode == MODE_EVENT else 'additional')
    new_index = len(tournament.rounds)

    # Event games only seat players who are currently active.
    roster = tournament.active_participants if tournament.mode == MODE_EVENT else tournament.participants
    if kind == 'additional':
        new_round = generate_additional_round(roster, tournament.rounds, new_index)
    elif kind == 'championship':
        standings = calculate_standings(roster, tournament.rounds, prize_only=True)
        if len(standings) < MIN_PARTICIPANTS:
            return _error(f'At least {MIN_PARTICIPANTS} ranked participants are required', 400)
        new_round = generate_championship_round(roster, standings, tournament.rounds, new_index)
    elif kind == MODE_EVENT:
        court_count = body.get('num_courts') or tournament.num_courts or app.config['DEFAULT_NUM_COURTS']
        if not isinstance(court_count, int) or court_count < 1:
            return _error('Court count must be a positive integer', 400)
        new_round = generate_event_round(tournament.active_participants, tournament.participants,
                                         tournament.rounds, new_index, court_count)
    else:
        return _error('Round kind must be additional, championship or event', 400)

    if not new_round.matches:
        return _error('Not enough participants to fill a match', 400)

    tournament.rounds.append(new_round)
    g.game['tournament'] = tournament.to_dict()
    save_game(g.game)
    app.logger.info(f'Added {kind} round {new_index} to game {game_id}')
    return jsonify({'success': True, 'round': new_round.to_dict()}), 201


@app.route('/api/game/<game_id>/leaderboard', methods=['GET'])
def api_leaderboard(game_id):
    with _games_lock():
        data = load_game(game_id)
    if not data:
        return _error('Tournament not found', 404)
    tournament = Tournament.from_dict(data['tournament'])
    prize_only = request.args.get('prize_only', '').lower() in ('1', 'true', 'yes')
    standings = calculate_standings(tournament.participants, tournament.rounds, prize_only=prize_only)
    return jsonify({'success': True, 'standings': [s.to_dict() for s in standings]})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
