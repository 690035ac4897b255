"""Main CLI entry point for dropletkit.

This module provides the command-line interface for dropletkit, a provisioning
tool for single-droplet deployments. It includes commands for obtaining and
renewing Let's Encrypt certificates with certbot and for bootstrapping a
Strapi application with PostgreSQL, Node.js, Nginx and PM2.

The CLI is built using Click. Every certificate option can also be pre-set
through the environment variable named in its help text, which is how
unattended runs are configured.
"""

import os
from typing import Dict, Optional, Tuple

import click

from dropletkit import __version__
from dropletkit.utils.errors import ErrorHandler
from dropletkit.utils.logging import setup_logging


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--dry-run", is_flag=True, help="Show what would be done without executing")
@click.option("--log-file", help="Log to file in addition to console")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar="DROPLETKIT_CONFIG",
    help="YAML file with certbot/bootstrap settings",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    dry_run: bool,
    log_file: Optional[str],
    config_path: Optional[str],
) -> None:
    """dropletkit - droplet provisioning and certificate automation.

    Args:
        ctx: Click context object containing shared state
        verbose: Enable verbose output for detailed logging
        dry_run: Log external commands instead of executing them
        log_file: Optional path to log file for additional logging
        config_path: Optional YAML configuration file
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["dry_run"] = dry_run
    ctx.obj["log_file"] = log_file
    ctx.obj["config_path"] = config_path
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


def _runner(ctx: click.Context):
    from dropletkit.utils.commands import CommandRunner

    return CommandRunner(verbose=ctx.obj["verbose"], dry_run=ctx.obj["dry_run"])


def _config(ctx: click.Context):
    from dropletkit.config import ConfigManager

    return ConfigManager(ctx.obj["config_path"])


@cli.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def ssl(ctx: click.Context) -> None:
    """Obtain and renew Let's Encrypt certificates with certbot."""
    pass


@ssl.command()
@click.option("--server-type", envvar="SERVER_TYPE", help="nginx, apache, standalone or webroot [SERVER_TYPE]")
@click.option("--domains", envvar="DOMAINS", help="Comma or space separated domains [DOMAINS]")
@click.option("--email", envvar="EMAIL", help="Admin email for expiry notices [EMAIL]")
@click.option("--redirect", envvar="REDIRECT", help="y/n: force HTTPS redirect [REDIRECT]")
@click.option("--staging", envvar="STAGING", help="y/n: use the staging CA [STAGING]")
@click.option("--key-type", envvar="KEY_TYPE", help="rsa or ecdsa [KEY_TYPE]")
@click.option("--ec-curve", envvar="EC_CURVE", help="secp256r1, secp384r1 or secp521r1 [EC_CURVE]")
@click.option("--webroot-path", envvar="WEBROOT_PATH", help="Served directory for webroot mode [WEBROOT_PATH]")
@click.option("--hook-service", "hook_services", multiple=True, help="Extra service for the deploy hook to reload")
@click.option("--no-input", is_flag=True, help="Use defaults instead of prompting for missing values")
@click.pass_context
def setup(
    ctx: click.Context,
    server_type: Optional[str],
    domains: Optional[str],
    email: Optional[str],
    redirect: Optional[str],
    staging: Optional[str],
    key_type: Optional[str],
    ec_curve: Optional[str],
    webroot_path: Optional[str],
    hook_services: Tuple[str, ...],
    no_input: bool,
) -> None:
    """Obtain a certificate, install the renewal deploy hook and test renewal.

    Missing values are prompted for interactively. Run as root.
    """
    given = {
        "SERVER_TYPE": server_type,
        "DOMAINS": domains,
        "EMAIL": email,
        "REDIRECT": redirect,
        "STAGING": staging,
        "KEY_TYPE": key_type,
        "EC_CURVE": ec_curve,
        "WEBROOT_PATH": webroot_path,
    }

    try:
        from dropletkit.ssl.resolver import ClickPrompter, DefaultsPrompter
        from dropletkit.ssl.workflow import CertificateWorkflow, render_summary

        config_manager = _config(ctx)
        preset: Dict[str, str] = config_manager.certbot_values()
        preset.update({key: value for key, value in given.items() if value})

        workflow = CertificateWorkflow(
            runner=_runner(ctx),
            preset=preset,
            prompter=DefaultsPrompter() if no_input else ClickPrompter(),
            hook_services=list(config_manager.hook_services()) + list(hook_services),
        )
        report = workflow.run()

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Certificate setup")
        return

    click.echo(render_summary(report))


@ssl.command("install-hook")
@click.option("--service", "services", multiple=True, help="Extra service to reload after renewal")
@click.option("--hook-dir", default=None, help="Directory certbot runs deploy hooks from")
@click.pass_context
def install_hook(ctx: click.Context, services: Tuple[str, ...], hook_dir: Optional[str]) -> None:
    """Write only the deploy hook that reloads web servers after renewal."""
    try:
        from dropletkit.ssl.hooks import DEPLOY_HOOK_DIR, DeployHook, DeployHookInstaller

        extra = list(_config(ctx).hook_services()) + list(services)
        installer = DeployHookInstaller(hook_dir or DEPLOY_HOOK_DIR, dry_run=ctx.obj["dry_run"])
        hook = DeployHook.with_extra(extra)
        path = installer.install(hook)

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Deploy hook installation")
        return

    click.echo(f"✓ Deploy hook written to {path}")
    click.echo(f"  Reloads: {', '.join(hook.services)}")


@ssl.command("test-renewal")
@click.pass_context
def test_renewal(ctx: click.Context) -> None:
    """Run certbot renew --dry-run."""
    try:
        from dropletkit.ssl.certbot import CertbotClient

        result = CertbotClient(_runner(ctx)).renew_dry_run()

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Renewal test")
        return

    if result.success:
        click.echo(f"✓ {result.detail}")
    else:
        click.echo(f"✗ {result.detail}", err=True)
        ctx.exit(1)


@ssl.command()
@click.argument("domain")
@click.option("--live-dir", default="/etc/letsencrypt/live", help="certbot live directory")
@click.pass_context
def status(ctx: click.Context, domain: str, live_dir: str) -> None:
    """Show expiry information for DOMAIN's certificate."""
    try:
        from dropletkit.ssl.expiry import check_certificate_expiration

        info = check_certificate_expiration(os.path.join(live_dir, domain, "fullchain.pem"))

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Certificate status")
        return

    symbol = "✓" if info["status"] == "valid" else "⚠"
    click.echo(f"{symbol} {domain}: {info['status']}")
    click.echo(f"  Expires: {info['expires_at']} ({info['expires_in_days']} days)")
    if info["domains"]:
        click.echo(f"  Names:   {', '.join(info['domains'])}")


@cli.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def bootstrap(ctx: click.Context) -> None:
    """Bootstrap application stacks on a fresh droplet."""
    pass


@bootstrap.command()
@click.argument("db_password", required=False)
@click.argument("github_token", required=False)
@click.argument("droplet_name", required=False)
@click.argument("vpc_ip", required=False)
@click.option("--node-version", help="Node.js version installed through nvm")
@click.option("--repository", help="GitHub owner/name of the Strapi project")
@click.option("--github-user", help="GitHub user the token belongs to")
@click.option("--clone-dir", help="Where to clone the repository")
@click.option("--app-subdir", help="Strapi app directory inside the clone")
@click.option("--app-port", type=int, help="Port Strapi listens on")
@click.option("--db-name", help="PostgreSQL database name")
@click.option("--db-user", help="PostgreSQL role name")
@click.option("--postgres-version", help="PostgreSQL cluster version (detected when omitted)")
@click.pass_context
def strapi(
    ctx: click.Context,
    db_password: Optional[str],
    github_token: Optional[str],
    droplet_name: Optional[str],
    vpc_ip: Optional[str],
    **overrides,
) -> None:
    """Provision PostgreSQL, Node.js, Nginx and PM2 and start a Strapi app.

    Args:
        ctx: Click context object
        db_password: Password for the application database role
        github_token: Token used to clone the private repository
        droplet_name: Name of this droplet
        vpc_ip: Private address Strapi, Nginx and PostgreSQL bind to
    """
    try:
        from dropletkit.environments.detector import require_root
        from dropletkit.environments.strapi import StrapiBootstrap, StrapiBootstrapOptions

        settings = _config(ctx).bootstrap_settings()
        settings.update({key: value for key, value in overrides.items() if value is not None})

        options = StrapiBootstrapOptions(
            db_password=db_password or "",
            github_token=github_token or "",
            droplet_name=droplet_name or "",
            vpc_ip=vpc_ip or "",
            **settings,
        )

        if not ctx.obj["dry_run"]:
            require_root()

        click.echo(f"Bootstrapping Strapi on {options.droplet_name} ({options.vpc_ip})...")
        result = StrapiBootstrap(options, _runner(ctx)).run()

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Strapi bootstrap")
        return

    click.echo("✓ Strapi setup complete!")
    click.echo(f"  App directory: {result['app_dir']}")
    click.echo(f"  Environment:   {result['env_file']}")
    click.echo(f"  Nginx site:    {result['nginx_site']}")


if __name__ == "__main__":
    cli()
