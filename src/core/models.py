SKILL_LEVELS = ('low', 'medium', 'high')
DEFAULT_SKILL = 'medium'

MODE_CLASSIC = 'classic'
MODE_EVENT = 'event'


def make_match_id(round_index, court_index):
    return f"r{round_index}-c{court_index}"


def skill_value(level):
    """Numeric weight of a skill tier (low=1, medium=2, high=3)."""
    if level not in SKILL_LEVELS:
        level = DEFAULT_SKILL
    return SKILL_LEVELS.index(level) + 1


class Participant:
    def __init__(self, id, name, nickname=None, skill_level=None, prize_exempt=False, is_active=None):
        if skill_level is not None and skill_level not in SKILL_LEVELS:
            raise ValueError(f"Unknown skill level: {skill_level}")
        self.id = id
        self.name = name
        self.nickname = nickname
        self.skill_level = skill_level
        self.prize_exempt = prize_exempt
        self.is_active = is_active

    @property
    def active(self):
        # Unset means active; only an explicit False benches a participant.
        return self.is_active is not False

    def to_dict(self):
        data = {'id': self.id, 'name': self.name}
        if self.nickname:
            data['nickname'] = self.nickname
        if self.skill_level:
            data['skill_level'] = self.skill_level
        if self.prize_exempt:
            data['prize_exempt'] = True
        if self.is_active is not None:
            data['is_active'] = self.is_active
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data['name'],
            nickname=data.get('nickname'),
            skill_level=data.get('skill_level'),
            prize_exempt=bool(data.get('prize_exempt', False)),
            is_active=data.get('is_active'),
        )

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, skill_level={self.skill_level})"


class Match:
    def __init__(self, id, round_index, court_index, team_a, team_b, score_a=None, score_b=None):
        team_a = tuple(team_a)
        team_b = tuple(team_b)
        if len(team_a) != 2 or len(team_b) != 2:
            raise ValueError("Each team must have exactly two participants")
        if len(set(team_a + team_b)) != 4:
            raise ValueError(f"Match participants must be distinct: {team_a} vs {team_b}")
        self.id = id
        self.round_index = round_index
        self.court_index = court_index
        self.team_a = team_a
        self.team_b = team_b
        self.score_a = score_a
        self.score_b = score_b

    @property
    def is_completed(self):
        return self.score_a is not None and self.score_b is not None

    @property
    def participants(self):
        return self.team_a + self.team_b

    @property
    def is_championship(self):
        return 'championship' in self.id

    def set_score(self, team, value):
        """Set (or clear with None) the score of team 'A' or 'B'."""
        if value is not None:
            value = int(value)
            if value < 0:
                raise ValueError("Scores cannot be negative")
        if team == 'A':
            self.score_a = value
        elif team == 'B':
            self.score_b = value
        else:
            raise ValueError(f"Unknown team: {team}")

    def to_dict(self):
        return {
            'id': self.id,
            'round_index': self.round_index,
            'court_index': self.court_index,
            'team_a': list(self.team_a),
            'team_b': list(self.team_b),
            'score_a': self.score_a,
            'score_b': self.score_b,
            'is_completed': self.is_completed,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            round_index=data['round_index'],
            court_index=data['court_index'],
            team_a=data['team_a'],
            team_b=data['team_b'],
            score_a=data.get('score_a'),
            score_b=data.get('score_b'),
        )

    def __repr__(self):
        return f"Match(id={self.id}, court={self.court_index}, team_a={self.team_a}, team_b={self.team_b})"


class Round:
    def __init__(self, index, matches=None, byes=None):
        self.index = index
        self.matches = matches if matches else []
        self.byes = byes if byes else []

    @property
    def participants(self):
        """Every participant id in the round, playing or sitting out."""
        ids = [pid for match in self.matches for pid in match.participants]
        return ids + list(self.byes)

    def find_match(self, match_id):
        return next((m for m in self.matches if m.id == match_id), None)

    def to_dict(self):
        return {
            'index': self.index,
            'matches': [m.to_dict() for m in self.matches],
            'byes': list(self.byes),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            index=data['index'],
            matches=[Match.from_dict(m) for m in data.get('matches') or []],
            byes=list(data.get('byes') or []),
        )

    def __repr__(self):
        return f"Round(index={self.index}, matches={len(self.matches)}, byes={self.byes})"


class Tournament:
    def __init__(self, id, name, participants=None, rounds=None, mode=MODE_CLASSIC,
                 court_names=None, num_courts=None):
        if mode not in (MODE_CLASSIC, MODE_EVENT):
            raise ValueError(f"Unknown tournament mode: {mode}")
        self.id = id
        self.name = name
        self.participants = participants if participants else []
        self.rounds = rounds if rounds else []
        self.mode = mode
        self.court_names = court_names
        self.num_courts = num_courts

    @property
    def is_started(self):
        return bool(self.rounds)

    @property
    def active_participants(self):
        return [p for p in self.participants if p.active]

    def find_participant(self, participant_id):
        return next((p for p in self.participants if p.id == participant_id), None)

    def find_match(self, match_id):
        for rnd in self.rounds:
            match = rnd.find_match(match_id)
            if match is not None:
                return match
        return None

    def court_name(self, court_index):
        if self.court_names and court_index < len(self.court_names):
            return self.court_names[court_index]
        return f"Court {court_index + 1}"

    def to_dict(self):
        data = {
            'id': self.id,
            'name': self.name,
            'mode': self.mode,
            'participants': [p.to_dict() for p in self.participants],
            'rounds': [r.to_dict() for r in self.rounds],
            'is_started': self.is_started,
        }
        if self.court_names:
            data['court_names'] = list(self.court_names)
        if self.num_courts is not None:
            data['num_courts'] = self.num_courts
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            participants=[Participant.from_dict(p) for p in data.get('participants') or []],
            rounds=[Round.from_dict(r) for r in data.get('rounds') or []],
            mode=data.get('mode', MODE_CLASSIC),
            court_names=data.get('court_names'),
            num_courts=data.get('num_courts'),
        )

    def __repr__(self):
        return f"Tournament(id={self.id}, name={self.name}, mode={self.mode}, rounds={len(self.rounds)})"


class Standing:
    def __init__(self, participant_id, name, nickname=None, prize_exempt=False):
        self.participant_id = participant_id
        self.name = name
        self.nickname = nickname
        self.prize_exempt = prize_exempt
        self.total_points = 0
        self.matches_played = 0
        self.wins = 0
        self.losses = 0
        self.ties = 0
        self.point_differential = 0

    @property
    def avg_points(self):
        if not self.matches_played:
            return 0
        return round(self.total_points / self.matches_played, 1)

    def to_dict(self):
        return {
            'participant_id': self.participant_id,
            'name': self.name,
            'nickname': self.nickname,
            'prize_exempt': self.prize_exempt,
            'total_points': self.total_points,
            'matches_played': self.matches_played,
            'avg_points': self.avg_points,
            'wins': self.wins,
            'losses': self.losses,
            'ties': self.ties,
            'point_differential': self.point_differential,
        }

    def __repr__(self):
        return f"Standing(participant_id={self.participant_id}, total_points={self.total_points}, wins={self.wins})"
