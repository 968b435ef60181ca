#!/usr/bin/env python3
"""
nebularrctl - command line companion for the nebularr reconciler.

Offline commands work on instance definition files; ``status`` and
``reconcile`` talk to a running reconciler's status API.
"""

import json
import os

import click
import requests
import yaml
from tabulate import tabulate

from compiler.compiler import Compiler
from instances import InstanceConfigError, load_instances
from ir.serialize import ir_to_dict
from presets.audio import AUDIO_PRESETS
from presets.naming import DEFAULT_NAMING_PRESET, NAMING_PRESETS
from presets.video import DEFAULT_VIDEO_PRESET, VIDEO_PRESETS

API_BASE_URL = os.getenv("NEBULARR_API_URL", "http://localhost:8000/api/v1")


class StatusAPIClient:
    """HTTP client for the reconciler's status API."""

    def __init__(self, base_url: str = API_BASE_URL):
        self.base_url = base_url.rstrip("/")

    def _make_request(self, method: str, endpoint: str, **kwargs):
        """Make HTTP request to the API"""
        url = f"{self.base_url}{endpoint}"
        try:
            response = requests.request(method, url, timeout=10, **kwargs)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            click.echo(f"Error: {e}", err=True)
            if hasattr(e, "response") and e.response is not None:
                try:
                    error_detail = e.response.json()
                    click.echo(f"Detail: {error_detail}", err=True)
                except ValueError:
                    click.echo(f"Response: {e.response.text}", err=True)
            return None


def _load_or_exit(filename: str):
    try:
        # Offline commands must not need real secrets
        return load_instances(filename, environ=_PlaceholderEnviron())
    except InstanceConfigError as e:
        raise click.ClickException(str(e))


class _PlaceholderEnviron(dict):
    """Environment stand-in that resolves every secret reference."""

    def __contains__(self, key):
        return True

    def __getitem__(self, key):
        return os.environ.get(key, f"<{key}>")


@click.group()
@click.option("--api-url", default=API_BASE_URL, show_default=True, help="Status API base URL")
@click.pass_context
def cli(ctx, api_url):
    """nebularr CLI - validate, compile and inspect *arr configuration"""
    ctx.ensure_object(dict)
    ctx.obj["client"] = StatusAPIClient(api_url)


@cli.command()
@click.argument("filename", type=click.Path(exists=True, dir_okay=False))
def validate(filename):
    """Validate an instance definitions file"""
    instances = _load_or_exit(filename)
    click.echo(f"{filename} is valid ({len(instances)} instance(s))")
    for instance in instances:
        click.echo(f"  {instance.name}: {instance.app} at {instance.url}")


@cli.command("compile")
@click.argument("filename", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Choice(["yaml", "json"]), default="yaml")
@click.option("--instance", "-i", "instance_name", help="Only compile this instance")
def compile_instances(filename, output, instance_name):
    """Compile instance definitions to IR (secrets redacted)"""
    instances = _load_or_exit(filename)
    if instance_name:
        instances = [i for i in instances if i.name == instance_name]
        if not instances:
            raise click.ClickException(f"Instance '{instance_name}' not found in {filename}")

    compiler = Compiler()
    documents = {
        instance.name: ir_to_dict(compiler.compile(instance.intent), redact_secrets=True)
        for instance in instances
    }

    if output == "json":
        click.echo(json.dumps(documents, indent=2))
    else:
        click.echo(yaml.safe_dump(documents, default_flow_style=False, sort_keys=False))


@cli.command("presets")
@click.argument("kind", type=click.Choice(["video", "audio", "naming"]), default="video")
def list_presets(kind):
    """List built-in presets"""
    if kind == "video":
        rows = [
            [
                name + (" (default)" if name == DEFAULT_VIDEO_PRESET else ""),
                ", ".join(t.resolution for t in preset.tiers),
                ", ".join(preset.preferred_formats) or "-",
                preset.description,
            ]
            for name, preset in sorted(VIDEO_PRESETS.items())
        ]
        headers = ["Name", "Resolutions", "Preferred", "Description"]
    elif kind == "audio":
        rows = [
            [name, ", ".join(preset.tiers), preset.upgrade_until, preset.description]
            for name, preset in sorted(AUDIO_PRESETS.items())
        ]
        headers = ["Name", "Tiers", "Upgrade Until", "Description"]
    else:
        rows = [
            [name + (" (default)" if name == DEFAULT_NAMING_PRESET else ""), description]
            for name, description in sorted(NAMING_PRESETS.items())
        ]
        headers = ["Name", "Description"]

    click.echo(tabulate(rows, headers=headers, tablefmt="simple"))


@cli.command()
@click.argument("name", required=False)
@click.pass_context
def status(ctx, name):
    """Show reconciliation status of all instances, or one in detail"""
    client = ctx.obj["client"]

    if name:
        result = client._make_request("GET", f"/instances/{name}")
        if result:
            click.echo(yaml.safe_dump(result, default_flow_style=False, sort_keys=False))
        return

    result = client._make_request("GET", "/instances")
    if result is None:
        return
    if not result:
        click.echo("No instances configured")
        return

    rows = [
        [
            r["name"],
            r["app"],
            r["status"],
            r["last_applied_hash"] or "-",
            "yes" if r["drift_detected"] else "no",
            r["finished_at"] or "-",
        ]
        for r in result
    ]
    click.echo(
        tabulate(
            rows,
            headers=["Name", "App", "Status", "Applied Hash", "Drift", "Last Reconcile"],
            tablefmt="simple",
        )
    )


@cli.command()
@click.argument("name")
@click.pass_context
def reconcile(ctx, name):
    """Trigger reconciliation of an instance"""
    client = ctx.obj["client"]
    result = client._make_request("POST", f"/instances/{name}/reconcile")
    if result:
        click.echo(f"Reconciliation triggered for {name}")


if __name__ == "__main__":
    cli()
