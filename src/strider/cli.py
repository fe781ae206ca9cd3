"""CLI for the strider step tracker."""

from __future__ import annotations

import asyncio
import logging
import math

import click

from strider.config import state_path


def _open_store():
    from strider.store import JsonFileStore, TrackerStore

    return TrackerStore(JsonFileStore(state_path()))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """strider -- accelerometer step counter and session tracker."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


@main.command()
def status() -> None:
    """Show the persisted step count and sensitivity."""
    from strider.stats import compute_stats, format_distance

    state = _open_store().load()
    stats = compute_stats(state.steps, 0)
    click.echo(f"Steps:       {state.steps}")
    click.echo(f"Distance:    {format_distance(stats.distance_meters)} meters")
    click.echo(f"Sensitivity: {state.sensitivity:g}")
    click.echo(f"State file:  {state_path()}")


@main.command()
@click.argument("value", type=float)
def sensitivity(value: float) -> None:
    """Set the step detection threshold (5.0-20.0, step 0.5)."""
    from strider.engine import StepTracker
    from strider.timer import ManualTimer

    engine = StepTracker(store=_open_store(), timer=ManualTimer())
    applied = engine.set_sensitivity(value)
    if not math.isfinite(value):
        click.echo(f"Ignored non-finite sensitivity; still {applied:g}")
    elif applied != value:
        click.echo(f"Sensitivity clamped to {applied:g}")
    else:
        click.echo(f"Sensitivity set to {applied:g}")


@main.command()
def reset() -> None:
    """Reset the persisted step counter to zero."""
    from strider.engine import StepTracker
    from strider.timer import ManualTimer

    engine = StepTracker(store=_open_store(), timer=ManualTimer())
    previous = engine.steps
    engine.reset()
    click.echo(f"Steps reset ({previous} -> 0).")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--sensitivity", "-s", type=float, default=None,
              help="Threshold to replay with (default: persisted value).")
@click.option("--output", "-o", default=None, help="Write the result as JSON.")
def replay(file: str, sensitivity: float | None, output: str | None) -> None:
    """Replay a recorded sample capture through the step detector."""
    from strider.replay import replay_file

    if sensitivity is None:
        sensitivity = _open_store().load().sensitivity

    result = replay_file(file, sensitivity=sensitivity, output_path=output)
    snap = result.snapshot

    click.echo(f"\n{'=' * 48}")
    click.echo(f"  Records:     {result.total_records} "
               f"({result.missing_samples} without acceleration)")
    click.echo(f"  Sensitivity: {snap.sensitivity:g}")
    click.echo(f"  Delta:       mean {result.deltas.mean:.2f}, "
               f"peak {result.deltas.peak:.2f}")
    click.echo(f"  Steps:       {snap.steps}")
    click.echo(f"  Distance:    {snap.distance_meters} meters")
    click.echo(f"  Duration:    {snap.duration_label}")
    click.echo(f"  Frequency:   {snap.frequency} steps/min")
    click.echo(f"{'=' * 48}")

    message = result.share_message()
    click.echo(f"\n{message}" if message else "\nNo sessions to share!")
    if output:
        click.echo(f"\nResult written to {output}")


@main.command()
@click.option("--timeout", "-t", default=10.0, help="Scan timeout in seconds.")
def scan(timeout: float) -> None:
    """Scan for nearby BLE accelerometer devices."""
    from strider.scanner import scan as do_scan

    asyncio.run(do_scan(timeout))


@main.command()
@click.option("--address", "-a", default=None, help="BLE address to connect to.")
@click.option("--duration", "-d", default=None, type=float, help="Session length in seconds.")
@click.option("--record", "-r", default=None, help="Append received samples to a JSONL file.")
@click.option("--char", "char_uuid", default=None, help="Accelerometer characteristic UUID.")
def track(address: str | None, duration: float | None, record: str | None,
          char_uuid: str | None) -> None:
    """Track steps live from a BLE accelerometer."""
    from strider.ble import track_live
    from strider.config import ACCEL_CHAR_UUID
    from strider.engine import StepTracker
    from strider.share import format_share_message

    async def _track():
        engine = StepTracker(store=_open_store())
        return await track_live(engine, address, duration, record,
                                char_uuid or ACCEL_CHAR_UUID)

    try:
        snap = asyncio.run(_track())
    except KeyboardInterrupt:
        click.echo("\nStopped.")
        return

    if snap is not None:
        message = format_share_message(snap.sessions, snap.distance_meters,
                                       snap.duration_seconds)
        if message:
            click.echo(f"\n{message}")


if __name__ == "__main__":
    main()
