"""Config commands for hfs-upload."""

from __future__ import annotations

import click

from hfsupload.core.config import CONFIG_FILE, Config
from hfsupload.core.output import OutputFormat, print_error, print_key_value, print_output, print_success
from hfsupload.core.validation import RESUME_MODES, validate_server_url


@click.group()
def config() -> None:
    """Manage hfs-upload configuration."""
    pass


@config.command("init")
@click.option("--url", prompt="HFS server URL", help="HFS server URL")
@click.option("--profile", default="default", help="Profile name")
@click.option("--timeout", type=int, default=30, help="Request timeout in seconds")
@click.option("--no-verify-ssl", is_flag=True, help="Disable SSL verification")
@click.option("--skip-existing", is_flag=True, help="Skip files that already exist by default")
@click.option("--resume", type=click.Choice(RESUME_MODES), default="ask", help="Default answer to resume offers")
@click.option("--force", is_flag=True, help="Overwrite an existing profile")
def config_init(
    url: str,
    profile: str,
    timeout: int,
    no_verify_ssl: bool,
    skip_existing: bool,
    resume: str,
    force: bool,
) -> None:
    """Create configuration file with a new profile.

    Example:
        hfs-upload config init --url https://files.example.org
    """
    try:
        url = validate_server_url(url)
    except Exception as e:
        print_error(str(e))
        raise SystemExit(1)

    if CONFIG_FILE.exists():
        cfg = Config.load()
        if cfg.has_profile(profile) and not force:
            print_error(f"Profile '{profile}' already exists. Use --force to overwrite.")
            raise SystemExit(1)
    else:
        cfg = Config()

    cfg.add_profile(
        name=profile,
        url=url,
        verify_ssl=not no_verify_ssl,
        timeout=timeout,
        skip_existing=skip_existing,
        resume=resume,
    )

    if len(cfg.profiles) == 1:
        cfg.default_profile = profile

    cfg.save()

    print_success(f"Configuration saved to {CONFIG_FILE}")
    print_key_value({"profile": profile, "url": url, "resume": resume})


@config.command("show")
@click.option("--output", "-o", type=click.Choice(["json", "table"]), default="table")
def config_show(output: str) -> None:
    """Show current configuration."""
    try:
        cfg = Config.load()
    except Exception as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)

    if not cfg.profiles:
        print_error("No configuration found. Run 'hfs-upload config init' first.")
        raise SystemExit(1)

    if output == "json":
        print_output(
            {
                "config_file": str(CONFIG_FILE),
                "default_profile": cfg.default_profile,
                "profiles": {name: p.to_dict() for name, p in cfg.profiles.items()},
            },
            format=OutputFormat.JSON,
        )
        return

    print_key_value(
        {"config_file": str(CONFIG_FILE), "default_profile": cfg.default_profile},
        title="Configuration",
    )
    for name, profile in cfg.profiles.items():
        marker = " (default)" if name == cfg.default_profile else ""
        click.echo()
        click.echo(f"Profile: {name}{marker}")
        print_key_value(
            {
                "url": profile.url,
                "verify_ssl": profile.verify_ssl,
                "timeout": f"{profile.timeout}s",
                "skip_existing": profile.skip_existing,
                "resume": profile.resume,
            }
        )


@config.command("use-context")
@click.argument("profile")
def config_use_context(profile: str) -> None:
    """Switch the active profile.

    Example:
        hfs-upload config use-context production
    """
    cfg = Config.load()

    if not cfg.has_profile(profile):
        print_error(f"Profile '{profile}' not found.")
        click.echo(f"Available profiles: {', '.join(cfg.profiles.keys())}")
        raise SystemExit(1)

    cfg.set_default_profile(profile)
    cfg.save()

    print_success(f"Switched to profile '{profile}'")
