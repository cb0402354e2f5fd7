from __future__ import annotations

import json

import click
from flask import Flask

from erp_console.context import current_context
from erp_console.ui_strings import operator_message


def _echo_json(payload: dict) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def register_session_cli(app: Flask) -> None:
    @app.cli.group("session", help=operator_message("cli_session_help"))
    def session_group() -> None:
        pass

    @session_group.command("status")
    def session_status() -> None:
        session = current_context().session_store.snapshot()
        _echo_json(
            {
                "isAuthenticated": session.is_authenticated,
                "user": session.user.to_dict() if session.user else None,
            }
        )

    @session_group.command("login")
    @click.option("--email", prompt=True)
    @click.option("--password", prompt=True, hide_input=True)
    def session_login(email: str, password: str) -> None:
        auth_client = current_context().auth_client
        result = auth_client.login(email.strip().lower(), password)
        if not auth_client.is_authenticated():
            raise click.ClickException(result.message or operator_message("cli_login_failed"))
        user = auth_client.session_store.user
        click.echo(
            operator_message(
                "cli_login_success",
                email=(user.email if user else "") or email,
                role=(user.role if user else "") or "-",
            )
        )

    @session_group.command("logout")
    def session_logout() -> None:
        target = current_context().auth_client.logout()
        click.echo(operator_message("cli_logout_success", target=target))

    @session_group.command("whoami")
    def session_whoami() -> None:
        auth_client = current_context().auth_client
        if not auth_client.is_authenticated():
            raise click.ClickException(operator_message("cli_no_session"))
        user = auth_client.get_current_user()
        if user is None:
            raise click.ClickException(operator_message("cli_session_unverified"))
        _echo_json(user.to_dict())
