import os
import sys
import yaml
from core.models import Participant
from core.scheduler import generate_schedule, is_balanced_roster_size


def load_roster(file_path):
    """Load participants from a YAML list of names or {name, skill, exempt} mappings."""
    roster = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        entries = yaml.safe_load(file) or []
    for idx, entry in enumerate(entries):
        if isinstance(entry, dict):
            name = str(entry['name']).strip()
            roster.append(Participant(
                id=f"p{idx + 1}",
                name=name,
                skill_level=entry.get('skill'),
                prize_exempt=bool(entry.get('exempt', False)),
            ))
        else:
            roster.append(Participant(id=f"p{idx + 1}", name=str(entry).strip()))
    return roster


def format_schedule(roster, rounds):
    names = {p.id: p.name for p in roster}
    lines = []
    for rnd in rounds:
        if lines:
            lines.append("")
        lines.append(f"# Round {rnd.index + 1}")
        for match in rnd.matches:
            team_a = " & ".join(names[pid] for pid in match.team_a)
            team_b = " & ".join(names[pid] for pid in match.team_b)
            lines.append(f"Court {match.court_index + 1}: {team_a} vs {team_b}")
        if rnd.byes:
            lines.append(f"Sitting out: {', '.join(names[pid] for pid in rnd.byes)}")
    return "\n".join(lines)


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    roster_file = sys.argv[1] if len(sys.argv) > 1 else os.path.join(base_dir, 'data', 'roster.yaml')
    if not os.path.exists(roster_file):
        print(f"Roster file not found: {roster_file}", file=sys.stderr)
        return

    try:
        roster = load_roster(roster_file)
    except (ValueError, KeyError) as e:
        print(f"Invalid roster file {roster_file}: {e}", file=sys.stderr)
        return
    rounds = generate_schedule(roster)
    if not rounds:
        print(f"Warning: need at least 4 participants, found {len(roster)}.", file=sys.stderr)
        return

    if is_balanced_roster_size(len(roster)):
        print(f"# Whist schedule: {len(roster)} participants, {len(rounds)} rounds, partners and opponents balanced")
    else:
        print(f"# Rotation schedule: {len(roster)} participants, {len(rounds)} rounds, partners balanced")
    print()
    print(format_schedule(roster, rounds))


if __name__ == '__main__':
    main()
