"""
Main CLI Entry Point
Unified command-line interface for:
- Static site deployment to Vercel / Netlify
- Provider-side custom domain management
- WHOIS expiry lookups and domain status
- Running the HTTP API
"""

import sys
import argparse
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.api import APIError, get_hosting_provider
from src.persistence import InMemoryRepository
from src.services import DeploymentOrchestrator, OrchestratorError, WhoisClient, compute_status
from src.utils.config import get_settings
from src.utils.logger import get_logger
from src.utils.validators import validate_domain, validate_slug, ValidationError

logger = get_logger(__name__)
console = Console()

PLATFORMS = ["VERCEL", "NETLIFY"]

STATUS_STYLES = {
    "ACTIVE": "green",
    "EXPIRING_SOON": "yellow",
    "EXPIRED": "red",
}


def cmd_deploy(args):
    """Deploy a finished build directory"""
    logger.info(f"Starting deploy: {args.build_dir} → {args.platform}")

    try:
        settings = get_settings()
        project_name = validate_slug(args.project_name)
        provider = get_hosting_provider(args.platform, settings)
        orchestrator = DeploymentOrchestrator(provider, InMemoryRepository(), config=settings)

        result = orchestrator.deploy(
            project_id=project_name,
            project_name=project_name,
            build_dir=Path(args.build_dir),
        )

        metadata = result.record.metadata
        summary = Table(show_header=False, box=None)
        summary.add_row("[cyan]URL:[/cyan]", f"[bold green]{result.url}[/bold green]")
        summary.add_row("[cyan]Deployment:[/cyan]", result.deployment_id)
        summary.add_row("[cyan]Files:[/cyan]", str(metadata.get("files", 0)))
        summary.add_row("[cyan]Build time:[/cyan]", f"{result.record.build_time_ms} ms")
        if not result.aliased:
            summary.add_row("[cyan]Alias:[/cyan]", "[yellow]not assigned, using raw URL[/yellow]")
        if result.timed_out:
            summary.add_row("[cyan]Readiness:[/cyan]", "[yellow]still building when polling stopped[/yellow]")

        console.print(Panel(summary, title="✅ Deployed", border_style="green"))

    except OrchestratorError as e:
        logger.error(f"❌ Deployment failed during {e.stage.value}: {str(e)}")
        sys.exit(1)
    except (APIError, ValidationError) as e:
        logger.error(f"❌ Deployment failed: {str(e)}")
        sys.exit(1)


def cmd_domains_list(args):
    """List custom domains linked to a provider project"""
    try:
        provider = get_hosting_provider(args.platform)
        domains = provider.list_domains(validate_slug(args.project_name))

        table = Table(title=f"Domains for {args.project_name}", show_header=True, header_style="bold magenta")
        table.add_column("Domain", style="cyan")
        table.add_column("Verified")
        table.add_column("Created")

        for domain in domains:
            created = domain.created_at.strftime("%Y-%m-%d") if domain.created_at else "N/A"
            table.add_row(domain.name, "✅" if domain.verified else "❌", created)

        console.print(table)

    except (APIError, ValidationError) as e:
        logger.error(f"❌ Failed to fetch domains: {str(e)}")
        sys.exit(1)


def cmd_domains_add(args):
    """Link a custom domain to a provider project"""
    try:
        provider = get_hosting_provider(args.platform)
        linked = provider.add_domain(validate_slug(args.project_name), validate_domain(args.domain))
        state = "verified" if linked.verified else "pending verification"
        console.print(f"[bold green]✅ {linked.name} added ({state})[/bold green]")

    except (APIError, ValidationError) as e:
        logger.error(f"❌ Failed to add domain: {str(e)}")
        sys.exit(1)


def cmd_domains_remove(args):
    """Unlink a custom domain from a provider project"""
    try:
        provider = get_hosting_provider(args.platform)
        provider.remove_domain(validate_slug(args.project_name), validate_domain(args.domain))
        console.print(f"[bold green]✅ {args.domain} removed[/bold green]")

    except (APIError, ValidationError) as e:
        logger.error(f"❌ Failed to remove domain: {str(e)}")
        sys.exit(1)


def cmd_whois_lookup(args):
    """Look up expiry and registrar over RDAP"""
    try:
        result = WhoisClient().lookup(args.domain)
    except ValidationError as e:
        logger.error(f"❌ Invalid domain: {str(e)}")
        sys.exit(1)

    if result.is_empty:
        console.print(f"[yellow]No WHOIS data found for {args.domain}[/yellow]")
        return

    status = compute_status(result.expires_at, window_days=get_settings().expiring_soon_days)
    style = STATUS_STYLES[status.value]

    table = Table(show_header=False, box=None)
    table.add_row("[cyan]Domain:[/cyan]", args.domain)
    table.add_row("[cyan]Registrar:[/cyan]", result.registrar or "N/A")
    table.add_row("[cyan]Expires:[/cyan]", result.expires_at.isoformat() if result.expires_at else "N/A")
    table.add_row("[cyan]Status:[/cyan]", f"[{style}]{status.value}[/{style}]")
    console.print(table)


def cmd_domain_status(args):
    """Show the status an expiry date maps to"""
    expires_at = None
    if args.expires_at:
        try:
            expires_at = datetime.fromisoformat(args.expires_at)
        except ValueError:
            logger.error(f"❌ Not an ISO-8601 date: {args.expires_at}")
            sys.exit(1)

    status = compute_status(expires_at, window_days=get_settings().expiring_soon_days)
    style = STATUS_STYLES[status.value]
    console.print(f"[{style}]{status.value}[/{style}]")


def cmd_serve(args):
    """Run the HTTP API"""
    import uvicorn
    from src.web import create_app

    logger.info(f"Serving API on {args.host}:{args.port}")
    uvicorn.run(create_app(), host=args.host, port=args.port)


def main():
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Static site deployment & domain management",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Deploy a build directory to Vercel
  python main.py deploy --build-dir ./output_files/builds/acme --project-name acme --platform VERCEL

  # List domains on a Netlify site
  python main.py domains list --project-name acme --platform NETLIFY

  # Link a domain
  python main.py domains add acme.com --project-name acme --platform VERCEL

  # RDAP lookup
  python main.py whois lookup acme.com

  # Status for an expiry date
  python main.py domain-status --expires-at 2027-01-01T00:00:00+00:00

  # Run the API
  python main.py serve --port 8000
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ==================== DEPLOY COMMAND ====================
    deploy_parser = subparsers.add_parser("deploy", help="Deploy a static build directory")
    deploy_parser.add_argument("--build-dir", required=True, help="Path to the finished build")
    deploy_parser.add_argument("--project-name", required=True, help="Provider project / site name (slug)")
    deploy_parser.add_argument("--platform", choices=PLATFORMS, required=True, help="Hosting provider")
    deploy_parser.set_defaults(func=cmd_deploy)

    # ==================== DOMAINS COMMAND ====================
    domains_parser = subparsers.add_parser("domains", help="Provider custom domains")
    domains_subparsers = domains_parser.add_subparsers(dest="domains_command", help="Domain operations")

    list_parser = domains_subparsers.add_parser("list", help="List linked domains")
    list_parser.add_argument("--project-name", required=True, help="Provider project / site name")
    list_parser.add_argument("--platform", choices=PLATFORMS, required=True, help="Hosting provider")
    list_parser.set_defaults(func=cmd_domains_list)

    add_parser = domains_subparsers.add_parser("add", help="Link a domain")
    add_parser.add_argument("domain", help="Domain name")
    add_parser.add_argument("--project-name", required=True, help="Provider project / site name")
    add_parser.add_argument("--platform", choices=PLATFORMS, required=True, help="Hosting provider")
    add_parser.set_defaults(func=cmd_domains_add)

    remove_parser = domains_subparsers.add_parser("remove", help="Unlink a domain")
    remove_parser.add_argument("domain", help="Domain name")
    remove_parser.add_argument("--project-name", required=True, help="Provider project / site name")
    remove_parser.add_argument("--platform", choices=PLATFORMS, required=True, help="Hosting provider")
    remove_parser.set_defaults(func=cmd_domains_remove)

    # ==================== WHOIS COMMAND ====================
    whois_parser = subparsers.add_parser("whois", help="RDAP lookups")
    whois_subparsers = whois_parser.add_subparsers(dest="whois_command", help="WHOIS operations")

    lookup_parser = whois_subparsers.add_parser("lookup", help="Expiry and registrar for a domain")
    lookup_parser.add_argument("domain", help="Domain name")
    lookup_parser.set_defaults(func=cmd_whois_lookup)

    # ==================== STATUS COMMAND ====================
    status_parser = subparsers.add_parser("domain-status", help="Status derived from an expiry date")
    status_parser.add_argument("--expires-at", help="ISO-8601 expiry (omit for no expiry)")
    status_parser.set_defaults(func=cmd_domain_status)

    # ==================== SERVE COMMAND ====================
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port (default: 8000)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
