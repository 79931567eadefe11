"""
Command-line interface for the proximity doze daemon
"""

import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

import click

from proximity_doze.config.settings import (
    Settings,
    get_settings,
    load_settings_from_file,
    validate_settings,
)
from proximity_doze.core.gesture_config import GESTURE_KEYS
from proximity_doze.core.ports import ScreenEvent
from proximity_doze.core.radio import RadioController
from proximity_doze.core.radio_toggle import RadioToggle
from proximity_doze.hardware.pulse_broadcaster import PulseBroadcaster
from proximity_doze.logger import setup_logging
from proximity_doze.services.doze_service import DozeService, create_radio_port
from proximity_doze.services.preference_store import InMemoryPreferenceStore
from proximity_doze.testing.simulated import (
    ManualAlarmScheduler,
    SimulatedPowerController,
    SimulatedProximitySensor,
    SimulatedRadio,
)

logger = logging.getLogger(__name__)

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def get_settings_with_config(config_file: Optional[str] = None) -> Settings:
    """Get settings with optional config file."""
    if config_file:
        return load_settings_from_file(config_file)
    return get_settings()


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=True),
    help='Path to configuration (.env) file'
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose logging'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode'
)
@click.pass_context
def cli(ctx, config: Optional[str], verbose: bool, debug: bool):
    """Proximity doze daemon command line interface."""

    ctx.ensure_object(dict)

    settings = get_settings_with_config(config)
    if debug:
        settings = settings.model_copy(update={"debug": True, "log_level": "DEBUG"})
    setup_logging(settings)

    if verbose and not debug:
        logging.getLogger("proximity_doze").setLevel(logging.INFO)

    ctx.obj['settings'] = settings
    ctx.obj['verbose'] = verbose
    ctx.obj['debug'] = debug


@cli.command()
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['text', 'json']),
    default='text',
    help='Output format (default: text)'
)
@click.pass_context
def config(ctx, output_format: str):
    """Show the effective settings and any configuration issues."""

    settings: Settings = ctx.obj['settings']
    issues = validate_settings(settings)

    if output_format == 'json':
        payload = {"settings": settings.model_dump(), "issues": issues}
        click.echo(json.dumps(payload, indent=2, default=str))
        return

    click.echo(f"{settings.app_name} v{settings.version} ({settings.environment})")
    for key, value in settings.model_dump().items():
        click.echo(f"  {key}: {value}")
    if issues:
        click.echo("Configuration issues:")
        for issue in issues:
            click.echo(f"  - {issue}")


@cli.command()
@click.argument('trace', type=click.File('r'))
@click.option('--hand-wave', is_flag=True, help='Enable the hand wave gesture')
@click.option('--pocket', is_flag=True, help='Enable the pocket gesture')
@click.option('--proximity-wake', is_flag=True, help='Enable proximity wake')
@click.option('--radio-off', is_flag=True, help='Start with the radio disabled')
@click.option(
    '--format',
    'output_format',
    type=click.Choice(['text', 'json']),
    default='text',
    help='Output format (default: text)'
)
@click.pass_context
def replay(ctx, trace, hand_wave: bool, pocket: bool, proximity_wake: bool,
           radio_off: bool, output_format: str):
    """Replay a screen/sensor trace against a simulated device.

    \b
    Trace lines:
      screen_off | screen_on
      sample <distance> <timestamp_ns>
      advance <seconds>
      pref <key> <true|false>
    """

    settings: Settings = ctx.obj['settings']
    try:
        commands = parse_trace(trace.read().splitlines())
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='TRACE')

    events = run_replay(
        settings,
        commands,
        gestures={
            "gesture_hand_wave": hand_wave,
            "gesture_pocket": pocket,
            "proximity_wake_enable": proximity_wake,
        },
        radio_enabled=not radio_off,
    )

    if output_format == 'json':
        click.echo(json.dumps(events, indent=2))
        return

    for event in events:
        effects = ", ".join(event["effects"]) or "-"
        click.echo(f"[{event['line']:>3}] {event['command']:<40} {effects}")


@cli.command('toggle-radio')
@click.option(
    '--seconds',
    type=float,
    default=None,
    help='How long to keep the radio on (default: radio_enable_window_seconds)'
)
@click.pass_context
def toggle_radio(ctx, seconds: Optional[float]):
    """Turn the radio on, wait, then turn it off again."""

    settings: Settings = ctx.obj['settings']
    radio = RadioController(create_radio_port(settings))
    toggle = RadioToggle(radio, settings.radio_enable_window_seconds)
    duration = settings.radio_enable_window_seconds if seconds is None else seconds

    click.echo(f"Radio on for {duration:.1f}s (Ctrl+C to stop early)")
    future = toggle.toggle_radio_on_for(duration)
    try:
        future.result()
    except KeyboardInterrupt:
        click.echo("Interrupted, turning radio off")
        toggle.interrupt(wait=True)
    finally:
        toggle.shutdown(wait=True)
    click.echo(f"Radio state: {radio.get_state().value}")


# ---------------------------------------------------------------------------
# Trace replay
# ---------------------------------------------------------------------------

TraceCommand = Tuple[int, str, List[str]]


def parse_trace(lines: List[str]) -> List[TraceCommand]:
    """Parse trace lines into ``(line_number, verb, args)`` tuples."""
    commands: List[TraceCommand] = []
    for number, raw in enumerate(lines, start=1):
        line = raw.split('#', 1)[0].strip()
        if not line:
            continue
        verb, *args = line.split()
        verb = verb.lower()

        if verb in ('screen_off', 'screen_on'):
            expected = 0
        elif verb == 'sample':
            expected = 2
        elif verb == 'advance':
            expected = 1
        elif verb == 'pref':
            expected = 2
        else:
            raise ValueError(f"line {number}: unknown command {verb!r}")

        if len(args) != expected:
            raise ValueError(f"line {number}: {verb} takes {expected} argument(s)")

        try:
            if verb == 'sample':
                float(args[0])
                int(args[1])
            elif verb == 'advance':
                float(args[0])
            elif verb == 'pref':
                if args[0] not in GESTURE_KEYS:
                    raise ValueError(f"unknown preference {args[0]!r}")
                _parse_bool(args[1])
        except ValueError as e:
            raise ValueError(f"line {number}: {e}") from e

        commands.append((number, verb, args))
    return commands


def _parse_bool(text: str) -> bool:
    lowered = text.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def run_replay(
    settings: Settings,
    commands: List[TraceCommand],
    gestures: Dict[str, bool],
    radio_enabled: bool = True,
) -> List[Dict[str, Any]]:
    """Drive a simulated :class:`DozeService` through *commands* and report effects."""

    # Restore windows run on a real worker thread; replay stays on the manual clock.
    settings = settings.model_copy(update={"radio_restore_window_seconds": None})

    alarms = ManualAlarmScheduler()
    sensor = SimulatedProximitySensor(max_range=settings.sensor_max_range)
    power = SimulatedPowerController(interactive=True)
    radio = SimulatedRadio(enabled=radio_enabled)
    broadcaster = PulseBroadcaster()
    preferences = InMemoryPreferenceStore(gestures)

    service = DozeService(
        settings=settings,
        sensor=sensor,
        power=power,
        radio=radio,
        alarms=alarms,
        pulse_emitter=broadcaster,
        preferences=preferences,
        clock_ns=alarms.clock_ns,
    )
    service.start()

    events: List[Dict[str, Any]] = []
    try:
        for number, verb, args in commands:
            pulses = broadcaster.pulse_count
            wakes = len(power.wake_ups)
            radio_ops = len(radio.history)
            was_active = service.proximity_filter.is_active
            effects: List[str] = []

            if verb == 'screen_off':
                power.interactive = False
                service.handle_screen_event(ScreenEvent.SCREEN_OFF)
            elif verb == 'screen_on':
                power.interactive = True
                service.handle_screen_event(ScreenEvent.SCREEN_ON)
            elif verb == 'sample':
                sensor.emit(float(args[0]), int(args[1]))
            elif verb == 'advance':
                fires = alarms.advance(float(args[0]))
                if fires:
                    effects.append(f"restore_fired x{fires}")
            elif verb == 'pref':
                preferences.set_bool(args[0], _parse_bool(args[1]))

            if broadcaster.pulse_count > pulses:
                effects.append("pulse")
            if len(power.wake_ups) > wakes:
                effects.append("wake")
            for enabled in radio.history[radio_ops:]:
                effects.append("radio_on" if enabled else "radio_off")
            if service.proximity_filter.is_active != was_active:
                effects.append(
                    "sensor_enabled" if service.proximity_filter.is_active else "sensor_disabled"
                )

            events.append({
                "line": number,
                "command": " ".join([verb, *args]),
                "clock_s": alarms.now_seconds,
                "effects": effects,
            })
    finally:
        service.stop()

    return events


def main():
    """Console script entry point."""
    try:
        cli(obj={})
    except Exception as e:
        logger.error(f"CLI error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
