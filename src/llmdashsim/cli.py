"""Command-line interface for llmdashsim."""

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from llmdashsim.cluster import APPLICATIONS, CLUSTER_INFO, NODES, active_links, topology_summary
from llmdashsim.orchestration import DashboardOrchestrator
from llmdashsim.utils.config_validator import validate_config_file

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _echo_tick(tick_number, samples):
    click.echo(
        f"[{samples.latency.time}] #{tick_number:<4} "
        f"p50={samples.latency.p50:6.1f}ms p95={samples.latency.p95:6.1f}ms "
        f"p99={samples.latency.p99:6.1f}ms  "
        f"tokens={samples.throughput.tokens:7.1f}/s  requests={samples.requests.requests:5.2f}/s"
    )


@click.group()
@click.version_option(version="0.1.0", prog_name="llmdashsim")
def cli():
    """llmdashsim: synthetic telemetry console for a simulated vLLM cluster."""
    pass


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Logging level"
)
@click.option("--realtime", is_flag=True, help="Pace ticks against the wall clock")
@click.option("--duration", "-d", type=float, help="Override max_simulation_time (seconds)")
@click.option("--watch", "-w", is_flag=True, help="Print every tick as it is sampled")
def run(config_file: str, format: str, log_level: str, realtime: bool, duration: float, watch: bool):
    """Run a dashboard session from a configuration file."""
    logging.getLogger().setLevel(getattr(logging, log_level))

    click.echo(f"Loading configuration from {config_file}...")

    try:
        with open(config_file, "r") as f:
            config = yaml.safe_load(f) if format == "yaml" else json.load(f)

        simulation = config.setdefault("simulation", {})
        if realtime:
            simulation["realtime"] = True
        if duration is not None:
            simulation["max_simulation_time"] = duration

        orchestrator = DashboardOrchestrator(config)
        if watch:
            orchestrator.add_tick_listener(_echo_tick)

        click.echo("Starting telemetry loop...")
        summary = orchestrator.run()

        click.echo("\nSession completed!")
        click.echo(f"Ticks: {summary['simulation']['ticks']}")
        for series_id, series in summary["series"].items():
            fields = ", ".join(
                f"{name} mean={stats['mean']:.1f}"
                for name, stats in series["fields"].items()
                if stats["count"]
            )
            click.echo(f"{series_id}: {series['samples']} samples ({fields or 'no data'})")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--output", "-o", default="example_config.yaml",
    help="Output file path"
)
@click.option(
    "--format", "-f", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
def generate_config(output: str, format: str):
    """Generate an example configuration file."""
    example_config = {
        "simulation": {
            "max_simulation_time": 60,
            "random_seed": 42,
            "realtime": False,
            "realtime_factor": 1.0,
        },
        "sampler": {
            "tick_period_s": 1.0,
        },
        "series": {
            "capacity": 20,
        },
        "control": {
            "request_rate": 10,
            "batch_size": 4,
            "max_tokens": 100,
            "is_generating": False,
        },
        "control_schedule": [
            {"at": 15.5, "set": {"is_generating": True}},
            {"at": 30.5, "set": {"request_rate": 25, "batch_size": 8}},
            {"at": 45.5, "set": {"is_generating": False}},
        ],
        "metrics_config": {
            "percentiles_to_calculate": [0.5, 0.95, 0.99],
            "output_summary_json_path": "results/summary.json",
            "output_series_csv_dir": "results/series",
            "output_plot_path": "results/telemetry.png",
        },
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if format == "yaml":
            yaml.dump(example_config, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(example_config, f, indent=2)

    click.echo(f"Generated example configuration at {output_path}")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a configuration file without running a session."""
    click.echo(f"Validating configuration: {config_file}")

    try:
        is_valid, errors, _ = validate_config_file(config_file)

        if is_valid:
            click.echo(click.style("✓ Configuration is valid", fg="green"))
        else:
            click.echo(click.style(f"✗ Configuration has {len(errors)} errors:", fg="red"))
            for i, error in enumerate(errors[:20], 1):
                click.echo(f"  {i}. {error}")
            if len(errors) > 20:
                click.echo(f"  ... and {len(errors) - 20} more errors")

        sys.exit(0 if is_valid else 1)

    except Exception as e:
        click.echo(click.style(f"Error validating configuration: {e}", fg="red"))
        sys.exit(1)


@cli.command()
def cluster():
    """Show the static cluster description."""
    click.echo(CLUSTER_INFO.title)
    click.echo(f"{CLUSTER_INFO.partitioning} • {CLUSTER_INFO.gpu_allocation} • Model: {CLUSTER_INFO.model}")

    click.echo("\nApplications:")
    for app in APPLICATIONS:
        click.echo(f"  {app.name:<16} {app.status:<8} {app.gpu} GPU  {app.memory:<10} up {app.uptime}")

    click.echo("\nNodes:")
    for node in NODES:
        color = "green" if node.active else None
        click.echo(click.style(f"  {node.name:<10} {node.role:<7} {node.status_label}", fg=color))

    for source, dest in active_links():
        click.echo(f"  link: {source.name} -> {dest.name}")

    summary = topology_summary()
    click.echo(
        f"\nTotal nodes: {summary['total']}  Serving: {summary['serving']}  "
        f"Idle: {summary['idle']}  Latency: {summary['latency_ms']}ms"
    )


if __name__ == "__main__":
    cli()
