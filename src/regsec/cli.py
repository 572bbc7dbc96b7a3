from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console

from .config import SecurityConfig, Settings
from .credentials import PasswordCredential
from .errors import SecurityError
from .http_client import HttpClient
from .loader import load_config_file
from .models import Report
from .reporter import Reporter
from .security import get_http_option
from .send_option import SendTLSTransport, describe
from .transport import BasicAuthTransport
from .util import redact, registry_host, registry_url

app = typer.Typer(add_completion=False, no_args_is_help=True)

log = logging.getLogger("regsec.cli")


def _settings(timeout: float, insecure: bool, helper_timeout: Optional[float]) -> Settings:
    return Settings(
        timeout_s=timeout,
        verify_tls=not insecure,
        helper_timeout_s=helper_timeout,
    )


def _load(console: Console, path: Path) -> SecurityConfig:
    try:
        return load_config_file(path).apply_defaults()
    except SecurityError as e:
        console.print(f"[bold red]error:[/bold red] {e}")
        raise typer.Exit(code=1)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("show-config")
def show_config(
    config: Path = typer.Argument(..., help="YAML or JSON security config"),
):
    console = Console()
    cfg = _load(console, config)
    tls = cfg.tls
    data = {
        "credsStore": cfg.creds_store or "-",
        "tls.name": tls.name or "-",
        "tls.ca.cert.path": tls.ca_cert_path,
        "tls.client.cert.path": tls.client_cert_path or "-",
        "tls.client.key.path": tls.client_key_path or "-",
        "tls.client.disabled": tls.client_disabled,
        "tls.insecure_skip_verify": tls.insecure_skip_verify,
        "basic": "configured" if cfg.basic is not None else "-",
    }
    if cfg.basic is not None:
        data["basic.username"] = cfg.basic.username or "-"
        data["basic.password"] = redact(cfg.basic.password) or "-"
        data["basic.password_file"] = cfg.basic.password_file or "-"
    Reporter(console).mapping(f"Security config {config}", data)


@app.command("resolve")
def resolve(
    config: Path = typer.Argument(..., help="YAML or JSON security config"),
    addr: str = typer.Argument(..., help="Registry address, e.g. registry.example.com:5000"),
    repo: str = typer.Option("library/busybox", "--repo"),
    helper_timeout: Optional[float] = typer.Option(None, "--helper-timeout"),
):
    """Show which transport and identity would be used for ADDR."""
    console = Console()
    reporter = Reporter(console)
    cfg = _load(console, config)
    settings = _settings(30.0, False, helper_timeout)
    host = registry_host(addr)
    report = Report(title=f"Resolution for {host}/{repo}")
    try:
        option = get_http_option(cfg, host, repo, settings=settings)
        report.ok("transport", describe(option))
        if isinstance(option, SendTLSTransport) and isinstance(option.transport, BasicAuthTransport):
            identity = option.transport.identity
            if isinstance(identity, PasswordCredential):
                kind = "empty" if identity.is_empty else "password"
                report.ok("identity", f"{kind} user={identity.username or '-'} secret={redact(identity.password) or '-'}")
            else:
                report.ok("identity", f"token {redact(identity.identity_token)}")
            report.ok("server address", identity.server_address or "(unset)")
    except SecurityError as e:
        log.debug("resolution failed", exc_info=True)
        report.fail("resolve", str(e))
    reporter.report(report)
    raise typer.Exit(code=reporter.exit_code(report))


@app.command("ping")
def ping(
    config: Path = typer.Argument(..., help="YAML or JSON security config"),
    addr: str = typer.Argument(..., help="Registry address"),
    repo: str = typer.Option("library/busybox", "--repo"),
    timeout: float = typer.Option(30.0, "--timeout"),
    insecure: bool = typer.Option(False, "--insecure"),
    helper_timeout: Optional[float] = typer.Option(None, "--helper-timeout"),
):
    """Call the registry's /v2/ endpoint through the composed transport."""
    console = Console()
    reporter = Reporter(console)
    cfg = _load(console, config)
    settings = _settings(timeout, insecure, helper_timeout)
    host = registry_host(addr)
    report = Report(title=f"Ping {host}")
    try:
        option = get_http_option(cfg, host, repo, settings=settings)
    except SecurityError as e:
        report.fail("transport", str(e))
        reporter.report(report)
        raise typer.Exit(code=1)
    report.ok("transport", describe(option))

    url = registry_url(addr)
    with HttpClient(settings, option) as http:
        try:
            resp = http.get(url)
        except SecurityError as e:
            report.fail("auth", str(e))
        except httpx.HTTPError as e:
            report.fail("request", f"{url}: {e}")
        else:
            if resp.status_code == 200:
                report.ok("request", f"{url} HTTP 200")
            elif resp.status_code == 401:
                report.fail("request", f"{url} HTTP 401 unauthorized")
            else:
                report.warn("request", f"{url} HTTP {resp.status_code}")
    reporter.report(report)
    raise typer.Exit(code=reporter.exit_code(report))


if __name__ == "__main__":
    app()
