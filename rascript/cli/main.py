import json
import logging
from typing import Dict, List, Optional

import click
from pydantic import ValidationError

from rascript.config import get_default_config
from rascript.data.achievement import Achievement
from rascript.data.requirement import NumberFormat
from rascript.errors import RAScriptError
from rascript.export import achievements_from_output, load_script_output, script_output
from rascript.interpreter.script import AchievementScriptInterpreter
from rascript.trigger.achievement_builder import AchievementBuilder, parse_leaderboard, parse_value
from rascript.trigger.comparison import compare_achievements


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    config = get_default_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, config.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )


def _run(path) -> AchievementScriptInterpreter:
    interpreter = AchievementScriptInterpreter()
    if not interpreter.run_file(path):
        err = interpreter.error
        click.echo(f"{path}: {err.describe()}", err=True)
        if err.hint:
            click.echo(f"  hint: {err.hint}", err=True)
        raise SystemExit(1)
    return interpreter


@cli.command()
@click.argument("path")
def validate(path):
    interpreter = _run(path)
    click.echo(
        f"OK ({len(interpreter.achievements)} achievements, {len(interpreter.leaderboards)} leaderboards)"
    )


@cli.command()
@click.argument("path")
@click.option("-o", "--out", default="out.json")
def compile(path, out):
    interpreter = _run(path)
    with open(out, "w") as f:
        f.write(script_output(interpreter).model_dump_json(indent=2))
    click.echo(f"Wrote {out}")


def _load_notes(path) -> Dict[int, str]:
    """Memory notes file: a JSON object mapping addresses ("0x1234" or decimal) to note text."""
    if path is None:
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise click.BadParameter("notes file must contain a JSON object", param_hint="--notes")
    notes = {}
    for key, note in data.items():
        try:
            notes[int(key, 0)] = str(note)
        except ValueError:
            raise click.BadParameter(f"{key!r} is not an address", param_hint="--notes")
    return notes


def _echo_note(text: str) -> None:
    for line in text.splitlines():
        click.echo(f"      ; {line}")


def _echo_requirements(label, requirements, number_format, notes) -> None:
    click.echo(f"{label}:")
    for requirement in requirements:
        click.echo(f"  {requirement.display(number_format)}")
        if notes:
            _echo_note(requirement.notes_text(notes))


def _echo_trigger(text, number_format, notes, label="Core", alt_prefix="") -> None:
    builder = AchievementBuilder()
    builder.parse_requirements(text)
    _echo_requirements(label, builder.core_requirements, number_format, notes)
    for i, group in enumerate(builder.alternate_requirements, start=1):
        _echo_requirements(f"{alt_prefix}Alt {i}", group, number_format, notes)


def _echo_value(alternatives, notes) -> None:
    for i, terms in enumerate(alternatives, start=1):
        click.echo("Value:" if len(alternatives) == 1 else f"Value {i}:")
        for term in terms:
            click.echo(f"  {term.display()}")
            if notes and term.field is not None and term.field.is_memory_reference:
                _echo_note(notes.get(term.field.value, ""))


@cli.command()
@click.argument("trigger")
@click.option("--hex", "hex_values", is_flag=True, help="Show literals in hexadecimal")
@click.option("--value", "is_value", is_flag=True, help="TRIGGER is a leaderboard value string")
@click.option("--notes", "notes_path", type=click.Path(exists=True, dir_okay=False),
              help="JSON file of memory notes to print under each requirement")
def show(trigger, hex_values, is_value, notes_path):
    """
    Print the requirements of a serialized trigger, one per line.

    A leaderboard definition (STA:...::CAN:...::SUB:...::VAL:...) is
    shown section by section.

    \b
    Example:
      rascript show "0xH001234=3_d0xH001234=2.1.S0xX000010>100"
      rascript show --value "0xH000010*10_v5$0x 000020"
    """
    if hex_values or get_default_config().number_format == "hex":
        number_format = NumberFormat.HEXADECIMAL
    else:
        number_format = NumberFormat.DECIMAL
    notes = _load_notes(notes_path)

    try:
        if is_value:
            _echo_value(parse_value(trigger), notes)
        elif trigger.startswith("STA:"):
            leaderboard = parse_leaderboard(trigger)
            for label, text in (("Start Conditions", leaderboard.start),
                                ("Cancel Condition", leaderboard.cancel),
                                ("Submit Condition", leaderboard.submit)):
                _echo_trigger(text, number_format, notes, label, alt_prefix=f"{label} ")
            _echo_value(parse_value(leaderboard.value), notes)
        else:
            _echo_trigger(trigger, number_format, notes)
    except RAScriptError as e:
        click.echo(f"Error: {e.describe()}", err=True)
        raise click.Abort()


def _load_achievements(path) -> List[Achievement]:
    if path.endswith(".json"):
        try:
            return achievements_from_output(load_script_output(path))
        except (ValidationError, RAScriptError) as e:
            click.echo(f"{path}: {e}", err=True)
            raise SystemExit(1)
    return _run(path).achievements


def _match(achievement: Achievement, candidates: List[Achievement]) -> Optional[Achievement]:
    for candidate in candidates:
        if achievement.id and achievement.id == candidate.id:
            return candidate
    for candidate in candidates:
        if achievement.title == candidate.title:
            return candidate
    return None


@cli.command()
@click.argument("local")
@click.argument("other")
@click.option("--hex", "hex_values", is_flag=True, help="Show literals in hexadecimal")
def compare(local, other, hex_values):
    """
    Compare the achievements of LOCAL against OTHER.

    Either side may be a script or a JSON file written by `rascript compile`.
    Achievements are matched by id, then by title.
    """
    number_format = NumberFormat.HEXADECIMAL if hex_values else NumberFormat.DECIMAL
    remaining = _load_achievements(other)

    for achievement in _load_achievements(local):
        match = _match(achievement, remaining)
        if match is None:
            click.echo(f"Only in {local}: {achievement.title}")
            continue
        remaining.remove(match)

        comparison = compare_achievements(achievement, match)
        if not comparison.is_modified:
            click.echo(f"Unchanged: {achievement.title}")
            continue

        changed = [name for name, flag in (("title", comparison.is_title_modified),
                                           ("description", comparison.is_description_modified),
                                           ("points", comparison.is_points_modified)) if flag]
        click.echo(f"Modified: {achievement.title}" + (f" ({', '.join(changed)})" if changed else ""))
        for group in comparison.groups:
            if not group.is_modified:
                continue
            click.echo(f"  {group.label}:")
            for pair in group.requirements:
                if not pair.is_modified:
                    click.echo(f"      {pair.local.display(number_format)}")
                    continue
                if pair.local is not None:
                    click.echo(f"    - {pair.local.display(number_format)}")
                if pair.other is not None:
                    click.echo(f"    + {pair.other.display(number_format)}")

    for achievement in remaining:
        click.echo(f"Only in {other}: {achievement.title}")


if __name__ == "__main__":
    cli()
