#!/usr/bin/env python
"""Simulated lanmafia sessions with stub clients.

Usage:
    lanmafia                             # One session, 7 stub players, instant timers
    lanmafia --players 10 --seed 42      # Reproducible session
    lanmafia --realtime                  # Real phase timers on the event loop
    lanmafia --validate --games 100      # Stress test with validators
"""

import argparse
import asyncio
import logging
import random
import sys
from collections import Counter
from typing import Callable, Optional

# Enable Windows console colors
if sys.platform == "win32":
    import colorama
    colorama.init()

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from lanmafia.ai import StubClient, create_stub_clients
from lanmafia.config import EngineSettings, load_settings
from lanmafia.engine import (
    AsyncioTimerFactory,
    CollectingValidator,
    EventCollector,
    LocalTransport,
    ManualTimerFactory,
    PhaseController,
    Randomizer,
)
from lanmafia.engine.validator import GameValidator
from lanmafia.events import EventFormatter, EventLog, GameEvent, StartGame
from lanmafia.logging_config import setup_logging
from lanmafia.models import RoleConfiguration

logger = logging.getLogger(__name__)

# Timer firings allowed in instant mode before a session is declared stuck
MAX_TIMER_STEPS = 500


class SessionReport(BaseModel):
    """Outcome of one simulated session."""

    seed: int
    winner: Optional[str] = None
    rounds: int = 0
    session_ended: Optional[str] = None
    violations: list = Field(default_factory=list)
    event_log: Optional[EventLog] = None


def build_configuration(
    players: int,
    killers: Optional[int] = None,
    healers: Optional[int] = None,
    investigators: Optional[int] = None,
) -> RoleConfiguration:
    """Recommended configuration for the player count, with explicit overrides."""
    config = RoleConfiguration.recommended(players)
    overrides = {
        key: value
        for key, value in (("killers", killers), ("healers", healers), ("investigators", investigators))
        if value is not None
    }
    return config.model_copy(update=overrides)


def _finished(host: StubClient, controller: PhaseController) -> bool:
    return host.game_over is not None or host.session_ended or controller.halted


async def run_session(
    configuration: RoleConfiguration,
    seed: int,
    settings: Optional[EngineSettings] = None,
    realtime: bool = False,
    validator: Optional[GameValidator] = None,
    on_event: Optional[Callable[[Optional[str], GameEvent], None]] = None,
) -> SessionReport:
    """Run one session from lobby to game over with stub clients.

    Args:
        configuration: Role counts (total_players sets the client count).
        seed: Seed for role assignment and client choices.
        settings: Engine settings.
        realtime: Use asyncio timers instead of firing timers instantly.
        validator: Optional audit hooks.
        on_event: Callback for every delivery (recipient, event).

    Returns:
        SessionReport with the winner and the event log.
    """
    settings = settings or EngineSettings()
    transport = LocalTransport()
    collector = EventCollector(on_event=on_event)
    manual_timers = None if realtime else ManualTimerFactory()

    controller = PhaseController(
        transport,
        settings=settings,
        randomizer=Randomizer(seed=seed),
        timer_factory=AsyncioTimerFactory(settings.tick_interval) if realtime else manual_timers,
        validator=validator,
        collector=collector,
    )
    clients = create_stub_clients(
        configuration.total_players,
        controller,
        seed=seed,
        allow_self_heal=settings.rules.allow_self_heal,
    )
    done = asyncio.Event()

    def watch(event: GameEvent) -> None:
        if event.kind in ("game_over", "session_ended"):
            done.set()

    for client in clients:
        transport.connect(client.connection_id, client.on_event)
    host = clients[0]
    transport.connect(host.connection_id, watch)

    for client in clients:
        client.join()
    host.send(StartGame(configuration=configuration))

    if realtime:
        task = asyncio.create_task(controller.run())
        await done.wait()
        await controller.wait_idle()
        controller.stop()
        await task
    else:
        await controller.drain()
        steps = 0
        while not _finished(host, controller) and steps < MAX_TIMER_STEPS:
            if manual_timers.fire_next() is None:
                break
            await controller.drain()
            steps += 1
        if not _finished(host, controller):
            logger.warning("Session with seed %d did not finish", seed)

    event_log = collector.get_event_log()
    event_log.metadata.update({"seed": seed, "configuration": configuration.summary()})
    violations = validator.get_violations() if isinstance(validator, CollectingValidator) else []

    return SessionReport(
        seed=seed,
        winner=host.game_over.winner.value if host.game_over else None,
        rounds=host.game_over.round_number if host.game_over else controller.state.round_number,
        session_ended=next(
            (e.reason for e in host.events if e.kind == "session_ended"), None
        ),
        violations=violations,
        event_log=event_log,
    )


def _print_event(console: Console, formatter: EventFormatter) -> Callable[[Optional[str], GameEvent], None]:
    """Delivery callback that prints public events and private ones with their recipient."""

    def callback(recipient: Optional[str], event: GameEvent) -> None:
        if event.kind == "timer_updated":
            return
        text = escape(formatter.format(event))
        if recipient is None:
            console.print(text)
        else:
            console.print(f"[dim]  (to {formatter.name(recipient)}) {text}[/dim]")

    return callback


def _save_log(console: Console, event_log: EventLog, path: str) -> None:
    try:
        if path.endswith((".yaml", ".yml")):
            event_log.save_to_file(path)
        else:
            with open(path, "w", encoding="utf-8") as f:
                f.write(str(event_log))
        console.print(f"Event log saved to {path}")
    except OSError as e:
        console.print(f"[red]Failed to save log: {escape(str(e))}[/red]")


def run_single(args: argparse.Namespace, settings: EngineSettings) -> SessionReport:
    console = Console()
    seed = args.seed if args.seed is not None else random.randint(1, 1_000_000)
    configuration = build_configuration(args.players, args.killers, args.healers, args.investigators)
    validator = CollectingValidator() if args.validate else None
    formatter = EventFormatter()

    console.print(f"\n[bold]Simulating session (seed {seed})[/bold]")
    console.print(f"[dim]{configuration.summary()}[/dim]\n")

    report = asyncio.run(run_session(
        configuration,
        seed,
        settings=settings,
        realtime=args.realtime,
        validator=validator,
        on_event=_print_event(console, formatter),
    ))

    if report.winner:
        body = f"[bold]Game Over[/bold]\n\nWinner: {report.winner}\nRounds: {report.rounds}"
    else:
        body = f"[bold]Session ended[/bold]\n\n{report.session_ended or 'unfinished'}"
    console.print(Panel(body, title="Result"))

    if args.validate:
        if report.violations:
            console.print(f"[red]{len(report.violations)} violation(s):[/red]")
            for v in report.violations:
                console.print(f"  {escape(v.describe())}")
        else:
            console.print("[green]No violations[/green]")

    if args.log_file and report.event_log is not None:
        _save_log(console, report.event_log, args.log_file)
    return report


def run_stress_test(
    num_games: int,
    args: argparse.Namespace,
    settings: EngineSettings,
    seed_base: Optional[int] = None,
) -> list[SessionReport]:
    """Run many sessions concurrently with validators and report results.

    Args:
        num_games: Number of sessions to run
        args: Parsed CLI arguments (player and role counts)
        settings: Engine settings
        seed_base: Optional seed base (uses random if not provided)
    """
    console = Console()

    if seed_base is None:
        seed_base = random.randint(1, 1000000)

    configuration = build_configuration(args.players, args.killers, args.healers, args.investigators)
    console.print(f"\n[bold]Running stress test: {num_games} games...[/bold]")
    console.print(f"Seed base: {seed_base}, {configuration.summary()}")
    console.print("-" * 50)

    async def run_all():
        tasks = [
            run_session(configuration, seed_base + i, settings=settings, validator=CollectingValidator())
            for i in range(num_games)
        ]
        return await asyncio.gather(*tasks, return_exceptions=True)

    results = asyncio.run(run_all())

    reports = [r for r in results if isinstance(r, SessionReport)]
    errors = [r for r in results if isinstance(r, BaseException)]
    violations = [v for r in reports for v in r.violations]

    console.print("=" * 60)
    console.print("STRESS TEST REPORT")
    console.print("=" * 60)
    console.print(f"\nGames run: {num_games}")
    console.print(f"Completed: {sum(1 for r in reports if r.winner)}")
    console.print(f"Errors: {len(errors)}")

    winner_counts = Counter(r.winner for r in reports)
    console.print("\nWinner Distribution:")
    for winner, count in sorted(winner_counts.items(), key=lambda x: (x[0] is None, x[0] or "")):
        pct = (count / num_games) * 100
        console.print(f"  {winner}: {count} ({pct:.1f}%)")

    rounds = [r.rounds for r in reports if r.winner]
    if rounds:
        console.print(f"\nRounds: min {min(rounds)}, max {max(rounds)}, mean {sum(rounds) / len(rounds):.1f}")

    by_rule = Counter(v.rule_id for v in violations)
    console.print("\nViolations:")
    if by_rule:
        for rule_id, count in sorted(by_rule.items()):
            console.print(f"  {rule_id}: {count}")
    else:
        console.print("  None")

    if errors:
        console.print(f"\nErrors ({len(errors)}):")
        for e in errors[:5]:
            console.print(f"  {type(e).__name__}: {escape(str(e))}")

    console.print("=" * 60)
    return reports


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="lanmafia - simulated social deduction sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--players", type=int, default=7, help="Number of stub players (default: 7)")
    parser.add_argument("--killers", type=int, default=None, help="Killer count (default: recommended)")
    parser.add_argument("--healers", type=int, default=None, help="Healer count (default: recommended)")
    parser.add_argument(
        "--investigators", type=int, default=None, help="Investigator count (default: recommended)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible sessions")
    parser.add_argument("--config", type=str, default=None, help="YAML settings file")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Run phase timers in real time instead of firing them instantly",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default="",
        help="Save the event log (.yaml/.yml for YAML, anything else for text)",
    )
    parser.add_argument("--log-level", type=str, default=None, help="Log level (default: from settings)")
    parser.add_argument("--validate", action="store_true", help="Enable in-game validators")
    parser.add_argument(
        "--games",
        type=int,
        default=None,
        help="Run N sessions with validators (stress test mode)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        parser.error(str(e))

    setup_logging(args.log_level or settings.log_level)

    if args.games:
        run_stress_test(args.games, args, settings, seed_base=args.seed)
    else:
        run_single(args, settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())
