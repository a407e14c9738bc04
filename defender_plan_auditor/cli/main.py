#!/usr/bin/env python3
"""Command-line interface for Defender Plan Auditor"""

import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .. import __version__
from ..auth.manager import AuthenticationManager
from ..clients.pricing_client import DefenderPricingClient
from ..clients.resource_enumerator import AzureResourceEnumerator
from ..core.exceptions import AuthenticationError, ExportError
from ..core.profiles import PROFILES, get_profile
from ..core.scanner import ScanCoordinator
from ..reporting.console import ConsoleScanObserver, display_report
from ..reporting.csv_export import export_to_csv
from ..utils.config import ConfigurationLoader, parse_subscription_ids
from ..utils.logger import ROOT_LOGGER_NAME, setup_logger

app = typer.Typer(
    name="defender-plan-auditor",
    help="🛡️  Audit Defender for Servers plans across Azure subscriptions",
    add_completion=False
)

console = Console()


def prompt_subscription_ids() -> List[str]:
    """Ask for subscription ids interactively"""
    answer = typer.prompt(
        "Enter subscription ID(s) separated by comma, semicolon or space",
        default="",
        show_default=False
    )
    return parse_subscription_ids(answer)


@app.command()
def scan(
    subscription_ids: Optional[List[str]] = typer.Option(
        None, "--subscription-id", "-s",
        help="Subscription IDs to scan, repeatable or delimiter separated (prompted for if omitted)"
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-l",
        help="Maximum number of resources to scan across all subscriptions (0 or less: no limit)"
    ),
    export_csv: bool = typer.Option(
        False, "--export-csv",
        help="Write the results to a CSV file"
    ),
    csv_path: Optional[str] = typer.Option(
        None, "--csv-path",
        help="CSV output path (defaults to defender_server_plans.csv)"
    ),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p",
        help="Resource coverage (default: compute). " + "; ".join(
            f"{name}: {PROFILES[name].description}" for name in sorted(PROFILES)
        )
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging and the per-label plan breakdown"
    )
):
    """🔍 Scan subscriptions for Defender for Servers plan settings"""

    setup_logger(ROOT_LOGGER_NAME, "DEBUG" if verbose else "WARNING")

    try:
        config = ConfigurationLoader().load_configuration(
            config_file,
            subscription_ids=parse_subscription_ids(subscription_ids) or None,
            limit=limit,
            profile=profile,
            export_csv=export_csv or None,
            csv_path=csv_path
        )
        scan_profile = get_profile(config.profile)
    except ValueError as e:
        console.print(f"❌ Invalid configuration: {escape(str(e))}", style="red")
        sys.exit(2)

    auth_manager = AuthenticationManager()
    try:
        auth_manager.get_access_token()
    except AuthenticationError as e:
        console.print(f"❌ Not signed in to Azure: {escape(str(e))}", style="red")
        console.print("Run 'az login' and try again.", style="yellow")
        sys.exit(1)

    targets = config.subscription_ids or prompt_subscription_ids()
    if not targets:
        console.print("❌ No subscription IDs provided.", style="red")
        sys.exit(1)

    try:
        console.print(
            f"\n🚀 Scanning {len(targets)} subscription(s) with profile '{scan_profile.name}'"
            + (f", limit {config.limit} resource(s)" if config.limit else "")
        )

        coordinator = ScanCoordinator(
            binder=auth_manager,
            enumerator=AzureResourceEnumerator(auth_manager.get_credential(), scan_profile.resource_types),
            pricing_client=DefenderPricingClient(auth_manager.get_access_token, api_version=config.api_version),
            profile=scan_profile,
            observer=ConsoleScanObserver(console, scan_profile, config.limit)
        )
        report = coordinator.run(targets, config.limit)
    except KeyboardInterrupt:
        console.print("\n❌ Scan cancelled by user.", style="red")
        sys.exit(130)

    display_report(console, report, scan_profile, verbose=verbose)

    if config.export_csv:
        try:
            output_path = export_to_csv(report.records, config.csv_path)
        except ExportError as e:
            console.print(f"❌ {escape(str(e))}", style="red")
            sys.exit(1)
        console.print(f"📁 Results exported to: {output_path}", style="green")


@app.command()
def list_subscriptions():
    """📋 List accessible Azure subscriptions"""

    try:
        auth_manager = AuthenticationManager()
        console.print("🔍 Discovering accessible Azure subscriptions...\n")
        subscription_ids = auth_manager.get_accessible_subscriptions()
    except Exception as e:
        console.print(f"❌ Failed to list subscriptions: {e}", style="red")
        sys.exit(1)

    if not subscription_ids:
        console.print("❌ No accessible subscriptions found.", style="red")
        return

    table = Table(title="Accessible Azure Subscriptions")
    table.add_column("Subscription ID", style="cyan")
    table.add_column("Name", style="green")

    for sub_id in subscription_ids:
        table.add_row(sub_id, auth_manager.get_subscription_name(sub_id))

    console.print(table)
    console.print(f"\n📊 Total: {len(subscription_ids)} accessible subscriptions")


@app.command()
def init_config(
    output_file: str = typer.Argument(
        "defender_plan_auditor.yml",
        help="Where to write the configuration file"
    )
):
    """📝 Write a configuration file with the default settings"""

    loader = ConfigurationLoader()
    try:
        loader.save_configuration(loader.load_configuration(), output_file)
    except (OSError, ValueError) as e:
        console.print(f"❌ Failed to write configuration: {e}", style="red")
        sys.exit(1)
    console.print(f"📁 Configuration written to: {output_file}", style="green")


@app.command()
def version():
    """📝 Show version information"""

    version_info = {
        "Defender Plan Auditor": __version__,
        "Python": sys.version.split()[0],
        "Platform": sys.platform
    }

    panel_content = "\n".join([f"{k}: {v}" for k, v in version_info.items()])
    console.print(Panel(panel_content, title="Version Information", expand=False))


def main():
    """Main entry point"""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n❌ Interrupted by user.", style="red")
        sys.exit(130)


if __name__ == "__main__":
    main()
