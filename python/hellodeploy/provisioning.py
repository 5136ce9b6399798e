# SPDX-License-Identifier: BSD-2-Clause
# Copyright (c) deftio llc

"""Windows IIS host provisioning.

The host is prepared by a fixed sequence of PowerShell scripts (the *plan*).
Each script tests for existence before creating anything, so a plan can be
re-run on a partially provisioned host. A failing step stops the run; the
steps before it are left in place.
"""

from __future__ import annotations

import sys

from hellodeploy._runner import CommandRunner, detect_powershell
from hellodeploy.errors import ProvisionStepFailed, UnsupportedPlatform
from hellodeploy.types import ProvisionReport, ProvisionStep, SiteSettings

PASSWORD_ENV = "HELLODEPLOY_ACCOUNT_PASSWORD"

_INETPUB = "C:\\inetpub"
_CERT_STORE = "Cert:\\LocalMachine\\My"
_PREAMBLE = "$ErrorActionPreference = 'Stop'\n"
_PASSWORD_STEPS = frozenset({"user", "app-pool"})
_POWERSHELL_ARGS = ("-NoProfile", "-NonInteractive", "-ExecutionPolicy", "Bypass", "-Command")


def ps_quote(value: str) -> str:
    """Quote *value* as a PowerShell single-quoted literal."""
    return "'" + value.replace("'", "''") + "'"


def derive_site(  # noqa: PLR0913
    password: str,
    *,
    site_name: str = "HelloWorld",
    app_name: str = "api",
    account_name: str = "helloworld_svc",
    hostname: str | None = None,
    app_pool: str | None = None,
    group_name: str | None = None,
    physical_path: str | None = None,
    log_path: str | None = None,
    http_port: int = 80,
    https_port: int = 443,
) -> SiteSettings:
    """Resolve a :class:`SiteSettings`, filling in derived defaults.

    Raises:
        ValueError: If the password or a name is empty, or a port is out of range.

    """
    if not password:
        msg = "a service-account password is required"
        raise ValueError(msg)
    names = (("site name", site_name), ("app name", app_name), ("account name", account_name))
    for label, value in names:
        if not value.strip():
            msg = f"{label} must not be empty"
            raise ValueError(msg)
    for label, port in (("http port", http_port), ("https port", https_port)):
        if not 1 <= port <= 65535:  # noqa: PLR2004
            msg = f"{label} must be between 1 and 65535, got {port}"
            raise ValueError(msg)

    return SiteSettings(
        password=password,
        site_name=site_name,
        app_name=app_name,
        account_name=account_name,
        hostname=hostname or f"{site_name.lower()}.local",
        app_pool=app_pool or f"{site_name}AppPool",
        group_name=group_name or f"{account_name}_group",
        physical_path=physical_path or f"{_INETPUB}\\{site_name}",
        log_path=log_path or f"{_INETPUB}\\logs\\{site_name}",
        http_port=http_port,
        https_port=https_port,
    )


# ---------------------------------------------------------------------------
# Plan
# ---------------------------------------------------------------------------


def _user_script(site: SiteSettings) -> str:
    user = ps_quote(site.account_name)
    desc = ps_quote(f"Application pool identity for {site.site_name}")
    return (
        f"if (-not (Get-LocalUser -Name {user} -ErrorAction SilentlyContinue)) {{\n"
        f"    $secure = ConvertTo-SecureString $env:{PASSWORD_ENV} -AsPlainText -Force\n"
        f"    New-LocalUser -Name {user} -Password $secure -PasswordNeverExpires"
        f" -Description {desc} | Out-Null\n"
        "}\n"
    )


def _group_script(site: SiteSettings) -> str:
    user = ps_quote(site.account_name)
    group = ps_quote(site.group_name)
    return (
        f"if (-not (Get-LocalGroup -Name {group} -ErrorAction SilentlyContinue)) {{\n"
        f"    New-LocalGroup -Name {group} | Out-Null\n"
        "}\n"
        f"$members = Get-LocalGroupMember -Group {group}"
        " | ForEach-Object { $_.Name.Split('\\')[-1] }\n"
        f"if ($members -notcontains {user}) {{\n"
        f"    Add-LocalGroupMember -Group {group} -Member {user}\n"
        "}\n"
    )


def _folders_script(site: SiteSettings) -> str:
    dirs = ", ".join(ps_quote(p) for p in (site.physical_path, site.app_path, site.log_path))
    return (
        f"foreach ($dir in @({dirs})) {{\n"
        "    if (-not (Test-Path -LiteralPath $dir)) {\n"
        "        New-Item -ItemType Directory -Path $dir | Out-Null\n"
        "    }\n"
        "}\n"
    )


def _permissions_script(site: SiteSettings) -> str:
    grant = ps_quote(f"{site.account_name}:(OI)(CI)RX")
    return (
        f"icacls {ps_quote(site.physical_path)} /grant {grant} /T /Q | Out-Null\n"
        "if ($LASTEXITCODE -ne 0) { exit $LASTEXITCODE }\n"
    )


def _app_pool_script(site: SiteSettings) -> str:
    pool = ps_quote(site.app_pool)
    pool_path = ps_quote(f"IIS:\\AppPools\\{site.app_pool}")
    return (
        "Import-Module WebAdministration\n"
        f"if (-not (Test-Path {pool_path})) {{\n"
        f"    New-WebAppPool -Name {pool} | Out-Null\n"
        "}\n"
        f"$account = $env:COMPUTERNAME + '\\' + {ps_quote(site.account_name)}\n"
        f"Set-ItemProperty {pool_path} -Name processModel -Value @{{"
        f"userName = $account; password = $env:{PASSWORD_ENV}; identityType = 'SpecificUser'}}\n"
    )


def _find_cert(site: SiteSettings) -> str:
    subject = ps_quote(f"CN={site.hostname}")
    return (
        f"$cert = Get-ChildItem -Path {ps_quote(_CERT_STORE)}"
        f" | Where-Object {{ $_.Subject -eq {subject} }} | Select-Object -First 1\n"
    )


def _certificate_script(site: SiteSettings) -> str:
    return _find_cert(site) + (
        "if (-not $cert) {\n"
        f"    New-SelfSignedCertificate -DnsName {ps_quote(site.hostname)}"
        f" -CertStoreLocation {ps_quote(_CERT_STORE)} | Out-Null\n"
        "}\n"
    )


def _site_path(site: SiteSettings) -> str:
    return ps_quote("IIS:\\Sites\\" + site.site_name)


def _website_script(site: SiteSettings) -> str:
    name = ps_quote(site.site_name)
    host = ps_quote(site.hostname)
    return (
        "Import-Module WebAdministration\n"
        f"if (Test-Path {_site_path(site)}) {{\n"
        f"    Remove-Website -Name {name}\n"
        "}\n"
        f"New-Website -Name {name} -PhysicalPath {ps_quote(site.physical_path)}"
        f" -ApplicationPool {ps_quote(site.app_pool)} -HostHeader {host}"
        f" -Port {site.http_port} | Out-Null\n"
        f"New-WebBinding -Name {name} -Protocol https -Port {site.https_port}"
        f" -HostHeader {host} -SslFlags 1\n"
        + _find_cert(site)
        + f"(Get-WebBinding -Name {name} -Protocol https)"
        ".AddSslCertificate($cert.Thumbprint, 'My')\n"
    )


def _logging_script(site: SiteSettings) -> str:
    return (
        "Import-Module WebAdministration\n"
        f"Set-ItemProperty {_site_path(site)}"
        f" -Name logFile.directory -Value {ps_quote(site.log_path)}\n"
    )


def _application_script(site: SiteSettings) -> str:
    return (
        "Import-Module WebAdministration\n"
        f"New-WebApplication -Site {ps_quote(site.site_name)} -Name {ps_quote(site.app_name)}"
        f" -PhysicalPath {ps_quote(site.app_path)} -ApplicationPool {ps_quote(site.app_pool)}"
        " -Force | Out-Null\n"
    )


def build_plan(site: SiteSettings) -> list[ProvisionStep]:
    """Return the ordered provisioning steps for *site*."""
    plan = [
        ("user", f"Ensure local user {site.account_name}", _user_script),
        ("group", f"Ensure group {site.group_name} containing the user", _group_script),
        ("folders", "Ensure site, application and log folders", _folders_script),
        ("permissions", f"Grant read/execute on {site.physical_path}", _permissions_script),
        ("app-pool", f"Run pool {site.app_pool} as {site.account_name}", _app_pool_script),
        ("certificate", f"Ensure self-signed certificate for {site.hostname}", _certificate_script),
        ("website", f"Recreate site {site.site_name} with HTTP and HTTPS", _website_script),
        ("logging", f"Write site logs to {site.log_path}", _logging_script),
        ("application", f"Register /{site.app_name} under {site.site_name}", _application_script),
    ]
    return [
        ProvisionStep(name=name, description=desc, script=_PREAMBLE + build(site))
        for name, desc, build in plan
    ]


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


def check_platform(platform: str | None = None) -> None:
    """Raise :class:`UnsupportedPlatform` unless running on Windows."""
    current = platform or sys.platform
    if current != "win32":
        raise UnsupportedPlatform(current)


def provision(
    site: SiteSettings,
    *,
    dry_run: bool = False,
    runner: CommandRunner | None = None,
    platform: str | None = None,
) -> ProvisionReport:
    """Provision the local IIS host for *site*, one step at a time.

    Args:
        site: Resolved site settings (see :func:`derive_site`).
        dry_run: Return the plan without executing anything.
        runner: Command runner. A plain :class:`CommandRunner` if ``None``.
        platform: Override for ``sys.platform``.

    Returns:
        A :class:`ProvisionReport` with the plan and the executed results.

    Raises:
        UnsupportedPlatform: If not running on Windows (and not a dry run).
        PowerShellNotFound: If no PowerShell executable is available.
        ProvisionStepFailed: On the first step that exits non-zero.

    """
    steps = build_plan(site)
    if dry_run:
        return ProvisionReport(site=site, steps=tuple(steps), dry_run=True)

    check_platform(platform)
    shell = detect_powershell()
    runner = runner or CommandRunner(kind="provision")
    results = []
    for step in steps:
        env = {PASSWORD_ENV: site.password} if step.name in _PASSWORD_STEPS else None
        result = runner.run(
            [shell, *_POWERSHELL_ARGS, step.script],
            env=env,
            display=f"{shell} -Command <{step.name}>",
            step=step.name,
        )
        results.append(result)
        if not result.ok:
            raise ProvisionStepFailed(step.name, result.exit_code, result.stderr)

    return ProvisionReport(site=site, steps=tuple(steps), results=tuple(results))
