"""handgesture CLI.

Usage:
    handgesture replay      Run a recorded anchor session through the engine
    handgesture synth       Write a synthetic recording (no headset needed)
    handgesture benchmark   Time the per-frame tick on synthetic hands
    handgesture config      Print or write the default engine config
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

app = typer.Typer(
    name="handgesture",
    help="Hand pose and pinch classification from skeletal joint streams.",
    add_completion=False,
)


@app.callback()
def main_options(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_config(path: Optional[str]):
    import yaml

    from handgesture.config import EngineConfig

    if path is None:
        return EngineConfig()
    try:
        return EngineConfig.from_yaml(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        typer.echo(f"❌ Could not load config {path}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def replay(
    recording: str = typer.Argument(..., help="Path to recording file"),
    speed: float = typer.Option(1.0, help="Playback speed multiplier"),
    realtime: bool = typer.Option(False, help="Play at original timing"),
    config: Optional[str] = typer.Option(None, help="Engine config YAML"),
    as_json: bool = typer.Option(False, "--json", help="Print one JSON result per frame"),
):
    """Replay a recorded session and report poses and pinches."""
    from handgesture.engine import GestureFrameEngine
    from handgesture.recorder import AnchorPlayer

    path = Path(recording)
    if not path.exists():
        typer.echo(f"❌ Recording not found: {recording}", err=True)
        raise typer.Exit(1)

    player = AnchorPlayer.load(path)
    engine = GestureFrameEngine(config=_load_config(config))
    if not as_json:
        typer.echo(f"▶️  Replaying {path.name} ({player.frame_count} frames, {player.duration:.1f}s)")

    last_poses: dict[str, tuple] = {}
    frames = player.play_realtime(speed=speed) if realtime else player.play()
    for frame in frames:
        result = engine.process(frame.anchors, timestamp=frame.timestamp)

        if as_json:
            typer.echo(json.dumps(result.to_dict()))
            continue

        for chirality, hand in result.hands.items():
            summary = (tuple(sorted(p.value for p in hand.poses)), hand.pinch_active)
            if last_poses.get(chirality.value) != summary:
                last_poses[chirality.value] = summary
                poses = ", ".join(summary[0]) or "-"
                pinch = " + pinch" if hand.pinch_active else ""
                typer.echo(f"   {frame.timestamp:7.3f}s {chirality.value:5s} {poses}{pinch}")
        if result.two_hand_poses:
            names = ", ".join(sorted(p.value for p in result.two_hand_poses))
            typer.echo(f"   {frame.timestamp:7.3f}s both  {names}")

    if not as_json:
        stats = engine.stats
        typer.echo(f"\n✅ Replay complete. {stats.total_frames} frames, {stats.two_hand_frames} with both hands.")


@app.command()
def synth(
    output: str = typer.Argument(..., help="Output recording path (.json)"),
    left: Optional[str] = typer.Option("open", help="Left hand pose (open, fist, point, pinch, none)"),
    right: Optional[str] = typer.Option("fist", help="Right hand pose (open, fist, point, pinch, none)"),
    duration: float = typer.Option(1.0, help="Recording duration in seconds"),
    fps: int = typer.Option(90, help="Frames per second"),
):
    """Write a synthetic recording with fixed poses for each hand."""
    from handgesture.joints import Chirality
    from handgesture.recorder import AnchorRecorder
    from handgesture.synthetic import POSES, make_hand

    poses = {Chirality.LEFT: left, Chirality.RIGHT: right}
    for chirality, pose in poses.items():
        if pose != "none" and pose not in POSES:
            typer.echo(f"❌ Unknown {chirality.value} pose '{pose}'", err=True)
            raise typer.Exit(1)

    offsets = {
        Chirality.LEFT: (-0.15, 1.0, -0.4),
        Chirality.RIGHT: (0.15, 1.1, -0.4),
    }

    recorder = AnchorRecorder()
    recorder.start()
    n_frames = max(1, int(duration * fps))
    for i in range(n_frames):
        ts = i / fps
        anchors = {
            c: make_hand(pose, c, offsets[c], timestamp=ts)
            for c, pose in poses.items()
            if pose != "none"
        }
        recorder.add_frame(anchors, timestamp=ts)
    recorder.stop()
    recorder.save(output)
    typer.echo(f"💾 Wrote {recorder.frame_count} frames to {output}")


@app.command()
def benchmark(
    iterations: int = typer.Option(1000, help="Number of iterations"),
    hands: int = typer.Option(2, help="Simulated hands per frame (1 or 2)"),
):
    """Time the per-frame tick on synthetic hands."""
    from handgesture.engine import GestureFrameEngine
    from handgesture.joints import Chirality
    from handgesture.synthetic import make_hand

    typer.echo(f"⚡ Running benchmark: {iterations} iterations, {hands} hand(s)")

    anchors = {Chirality.RIGHT: make_hand("pinch", Chirality.RIGHT, (0.15, 1.1, -0.4))}
    if hands >= 2:
        anchors[Chirality.LEFT] = make_hand("open", Chirality.LEFT, (-0.15, 1.0, -0.4))

    engine = GestureFrameEngine()
    times = []
    for i in range(iterations):
        t0 = time.perf_counter()
        engine.process(anchors, timestamp=i / 90)
        times.append(time.perf_counter() - t0)

    avg_ms = sum(times) / len(times) * 1000
    p95_ms = sorted(times)[int(len(times) * 0.95)] * 1000
    fps = 1000 / avg_ms if avg_ms > 0 else 0

    typer.echo(f"\n📊 Results:")
    typer.echo(f"   Average latency: {avg_ms:.3f} ms")
    typer.echo(f"   P95 latency:     {p95_ms:.3f} ms")
    typer.echo(f"   Throughput:      {fps:.0f} FPS")

    stats = engine.stats
    typer.echo(
        f"   Frame budget:    {stats.frame_budget_ms:.3f} ms "
        f"({stats.over_budget_frames} of {stats.total_frames} ticks over)"
    )

    typer.echo(f"\n📈 Stage breakdown:")
    for name, timing in stats.profiler_summary.items():
        typer.echo(f"   {name:22s} mean={timing['mean_ms']:.3f}ms  p95={timing['p95_ms']:.3f}ms")


@app.command("config")
def show_config(
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout"),
):
    """Print the default engine configuration as YAML."""
    from handgesture.config import EngineConfig

    config = EngineConfig()
    if output:
        config.to_yaml(output)
        typer.echo(f"💾 Saved to {output}")
    else:
        typer.echo(config.dumps(), nl=False)


def main():
    app()


if __name__ == "__main__":
    main()
