"""CLI interface for the GraphQL endpoint scraper."""

import asyncio
from pathlib import Path

import typer

from .config import settings
from .exceptions import ScraperError
from .observability import setup_structured_logging

app = typer.Typer(help="Scrape GraphQL endpoint ids from a web client's JS bundles")


@app.command()
def scrape(
    output: Path = typer.Option(None, "--output", "-o", help="Where to write the endpoint JSON"),
    headless: bool = typer.Option(None, "--headless/--headed", help="Run the browser without a window"),
    readiness_timeout: float = typer.Option(None, "--readiness-timeout", help="Seconds to wait for webpack chunks"),
    fetch_timeout: float = typer.Option(None, "--fetch-timeout", help="Seconds allowed per bundle fetch"),
) -> None:
    """Render the app, scan its bundles and save every GraphQL endpoint found."""
    from .discovery.machine import ScrapeMachine
    from .utils import write_result

    setup_structured_logging(settings.output.logging_level)

    browser = settings.browser
    if headless is not None:
        browser = browser.model_copy(update={"headless": headless})
    scraper = settings.scraper
    if readiness_timeout is not None:
        scraper = scraper.model_copy(update={"readiness_timeout": readiness_timeout})
    if fetch_timeout is not None:
        scraper = scraper.model_copy(update={"fetch_timeout": fetch_timeout})
    app_settings = settings.model_copy(update={"browser": browser, "scraper": scraper})

    target = output if output is not None else app_settings.get_output_path()

    typer.echo("=== GraphQL Endpoint Scraper ===\n")
    machine = ScrapeMachine(app_settings, narrate=typer.echo)
    try:
        result = asyncio.run(machine.run())
    except ScraperError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    saved = write_result(result, target)

    typer.echo("\n=== Done ===")
    typer.echo(f"{result.count} endpoints ({result.with_features} with features)")
    typer.echo(f"Saved to: {saved}")


@app.command()
def config(
    save: bool = typer.Option(False, "--save", help="Write the effective configuration to the config file"),
) -> None:
    """Show current configuration."""
    print(f"Entry URL: {settings.scraper.entry_url}")
    print(f"Service worker: {settings.scraper.service_worker_url}")
    print(f"Chunk registry: {settings.scraper.chunk_registry}")
    print(f"Bundle keywords: {', '.join(settings.scraper.bundle_keywords)}")
    print(f"Timeouts: navigation {settings.scraper.navigation_timeout}s, readiness {settings.scraper.readiness_timeout}s, fetch {settings.scraper.fetch_timeout}s")
    print(f"Headless: {settings.browser.headless}")
    print(f"Stealth: {settings.browser.stealth}")
    print(f"Proxy: {settings.browser.proxy_server or '(none)'}")
    print(f"Output: {settings.get_output_path()}")

    if save:
        path = settings.save()
        print(f"Saved to: {path}")


if __name__ == "__main__":
    app()
