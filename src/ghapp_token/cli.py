from datetime import datetime, timezone

import typer
from rich.console import Console
from rich.table import Table

from ghapp_token.cache import default_cache
from ghapp_token.config import get_settings
from ghapp_token.errors import TokenIssuanceError
from ghapp_token.issuer import TokenIssuer
from ghapp_token.log import setup_logging
from ghapp_token.schemas import IssuedToken

app = typer.Typer(
    name="ghapp-token",
    help="Installation-токены GitHub App",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


def parse_permissions(values: list[str] | None) -> dict[str, str] | None:
    if not values:
        return None
    permissions = {}
    for value in values:
        name, sep, level = value.partition("=")
        if not sep or not name.strip() or not level.strip():
            raise typer.BadParameter(f"ожидается NAME=LEVEL, получено: {value}", param_hint="--permission")
        permissions[name.strip()] = level.strip()
    return permissions


def print_token(token: IssuedToken, now: datetime | None = None) -> None:
    """Показать токен без раскрытия его значения."""
    now = now or datetime.now(timezone.utc)
    console.print("[bold]GitHub App Installation Token[/bold]")
    console.print(f"[bold]Token:[/bold] {token.preview}")

    expires = token.expires_at.strftime("%Y-%m-%d %H:%M:%S UTC")
    if token.expired(now):
        console.print(f"[bold]Expires:[/bold] {expires} [red](EXPIRED)[/red]")
    else:
        minutes = round(token.remaining(now).total_seconds() / 60)
        console.print(f"[bold]Expires:[/bold] {expires} ({minutes} minutes remaining)")

    if token.permissions:
        console.print("[bold]Permissions:[/bold]")
        for i, (name, level) in enumerate(token.permissions.items(), 1):
            console.print(f"  {i}. {name}: {level}")

    if token.repositories:
        console.print(f"[bold]Repositories:[/bold] {', '.join(token.repositories)}")


@app.command()
def token(
    app_id: str | None = typer.Option(None, "--app-id", help="GitHub App ID"),
    private_key_path: str | None = typer.Option(None, "--private-key-path", "-k", help="Путь к PEM-ключу"),
    installation_id: int | None = typer.Option(None, "--installation-id", "-i", help="ID установки"),
    repo: list[str] | None = typer.Option(None, "--repo", "-r", help="Ограничить токен репозиторием"),
    permission: list[str] | None = typer.Option(None, "--permission", "-p", help="Permission NAME=LEVEL"),
    api_url: str | None = typer.Option(None, "--api-url", help="GitHub API (для Enterprise)"),
    raw: bool = typer.Option(False, "--raw", help="Вывести только токен"),
    log_level: str | None = typer.Option(None, "--log-level", help="Уровень логов"),
):
    """Получить installation-токен."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    permissions = parse_permissions(permission)

    try:
        with TokenIssuer(
            cache=default_cache, api_url=api_url or settings.api_url, timeout=settings.timeout
        ) as issuer:
            issued = issuer.issue(
                app_id or settings.app_id,
                private_key=settings.private_key,
                private_key_path=private_key_path or settings.private_key_path,
                installation_id=installation_id if installation_id is not None else settings.installation_id,
                repositories=repo or None,
                permissions=permissions,
            )
    except TokenIssuanceError as e:
        console.print(str(e.cause), style="red", markup=False)
        raise typer.Exit(1)

    if raw:
        typer.echo(issued.token)
    else:
        print_token(issued)


@app.command()
def installations(
    app_id: str | None = typer.Option(None, "--app-id", help="GitHub App ID"),
    private_key_path: str | None = typer.Option(None, "--private-key-path", "-k", help="Путь к PEM-ключу"),
    api_url: str | None = typer.Option(None, "--api-url", help="GitHub API (для Enterprise)"),
    log_level: str | None = typer.Option(None, "--log-level", help="Уровень логов"),
):
    """Показать установки приложения."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)

    try:
        with TokenIssuer(api_url=api_url or settings.api_url, timeout=settings.timeout) as issuer:
            items = issuer.list_installations(
                app_id or settings.app_id,
                private_key=settings.private_key,
                private_key_path=private_key_path or settings.private_key_path,
            )
    except TokenIssuanceError as e:
        console.print(str(e.cause), style="red", markup=False)
        raise typer.Exit(1)

    if not items:
        console.print("[yellow]Установок нет[/yellow]")
        return

    table = Table("id", "account_login", "account_type", "repository_selection")
    for item in items:
        table.add_row(str(item.id), item.account.login, item.account.type, item.repository_selection)
    console.print(table)


if __name__ == "__main__":
    app()
