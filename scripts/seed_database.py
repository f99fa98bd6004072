#!/usr/bin/env python3
"""
CLI script to seed the reference tables (emission factors, CN codes) from CSV files.

Usage:
    # Basic seeding
    python scripts/seed_database.py

    # Apply migrations first, then seed
    python scripts/seed_database.py --migrate

    # Clear existing reference data before seeding
    python scripts/seed_database.py --clear

    # Use a different data directory
    python scripts/seed_database.py --data-dir path/to/csv/files

    # Using uv
    uv run python scripts/seed_database.py --clear
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.core.config import get_config
from app.database.base import apply_db_migration, get_db_url, get_engine_kw
from app.database.session_manager.db_session import Database
from app.services.seed_database import DEFAULT_DATA_DIR, DatabaseSeeder
from app.utils.constants import ConfigFile
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()


def print_header(text: str, style: str = "bold cyan"):
    """Print a formatted header using Rich Panel."""
    console.print(
        Panel(
            Text(text, justify="center", style=style),
            border_style="cyan",
            padding=(1, 2),
        )
    )


def print_config(args):
    """Print configuration details."""
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="bold yellow")
    config_table.add_column("Value", style="green")

    config_table.add_row("📁 Data Directory", str(args.data_dir))
    config_table.add_row("⚙️  Config File", args.config)
    config_table.add_row("🗑️  Clear Existing", "Yes" if args.clear else "No")
    config_table.add_row("🧱 Run Migrations", "Yes" if args.migrate else "No")

    console.print(config_table)
    console.print()


def print_stats(stats: dict):
    """Print seeding statistics using Rich Table."""
    print_header("SEEDING STATISTICS", "bold green")

    stats_table = Table(show_header=True, box=None, padding=(0, 2))
    stats_table.add_column("Category", style="bold cyan", width=30)
    stats_table.add_column("Count", justify="right", style="bold green")

    stats_table.add_row("🔥 Fuel Factors", str(stats["fuel_factors"]))
    stats_table.add_row("⚡ Grid Electricity Factors", str(stats["electricity_factors"]))
    stats_table.add_row("📦 CBAM Default Factors", str(stats["default_factors"]))
    stats_table.add_row("🏷️  CN Codes", str(stats["cn_codes"]))

    console.print(stats_table)
    console.print()

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Label", style="bold yellow")
    summary.add_column("Value", style="bold magenta")
    summary.add_row("📈 Total Emission Factors", str(stats["emission_factors"]))

    console.print(summary)

    if stats.get("errors"):
        console.print()
        console.print(
            Panel(
                f"[yellow]⚠️  {len(stats['errors'])} errors occurred during seeding[/yellow]",
                border_style="yellow",
            )
        )
        for i, error in enumerate(stats["errors"][:5], 1):
            console.print(f"  {i}. [dim]{error}[/dim]")
        if len(stats["errors"]) > 5:
            console.print(f"  [dim]... and {len(stats['errors']) - 5} more[/dim]")

    console.print()


async def main():
    """Main entry point for the seeding script."""
    parser = argparse.ArgumentParser(
        description="Seed the emission factor library and CN code registry from CSV files"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing global reference data before seeding",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply Alembic migrations before seeding",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help="Directory containing CSV files (default: app/reference_data)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=ConfigFile.DEVELOPMENT,
        help="Configuration file in app/configs (default: development.toml)",
    )

    args = parser.parse_args()

    print_header("DATABASE SEEDING", "bold cyan")
    print_config(args)

    try:
        config = get_config(args.config)
        if args.migrate:
            with console.status("[bold cyan]Applying migrations...", spinner="dots"):
                await apply_db_migration(config)

        async_db_url = get_db_url(config)
        Database.init(async_db_url, engine_kw=get_engine_kw(async_db_url))
        logger.info("Database initialized")

        with console.status(
            "[bold cyan]Seeding database...", spinner="dots"
        ) as status:
            async with DatabaseSeeder(data_dir=args.data_dir) as seeder:
                status.update("[bold yellow]Loading emission factors and CN codes...")
                stats = await seeder.seed_all(clear_existing=args.clear)

        print_stats(stats)

        console.print(
            Panel(
                Text("✅ SEEDING COMPLETED SUCCESSFULLY", justify="center"),
                border_style="bold green",
                style="bold green",
            )
        )

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)

        console.print()
        console.print(
            Panel(
                f"[bold red]❌ SEEDING FAILED[/bold red]\n\n[red]{e!s}[/red]",
                border_style="bold red",
            )
        )
        console.print()
        sys.exit(1)

    finally:
        await Database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
