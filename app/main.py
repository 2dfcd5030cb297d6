"""
Terminal Front-end for BankCLI

A numbered menu over the LedgerService. This layer only asks questions
and prints answers; every rule lives in the ledger engine.

DESIGN PRINCIPLES:
1. Show the engine's rejection messages verbatim
2. Never delete an account that still holds money
3. Always attempt a final save on exit, Ctrl-C or SIGTERM

One event loop (asyncio.Runner) lives for the whole session. A save's file
write runs in a worker thread while the user types the next answer.
"""

import asyncio
import signal
from decimal import Decimal
from pathlib import Path
from typing import Callable, Optional

import click

from bankcli.audit import configure_logging, create_correlation_id
from bankcli.config import get_settings, validate_all_settings
from bankcli.ledger import LedgerService
from bankcli.models.account import Account
from bankcli.orchestrator import create_ledger_service


MENU_OPTIONS = [
    "Create New Account",
    "View Account Details",
    "List All Accounts",
    "Deposit Funds",
    "Withdraw Funds",
    "Transfer Between Accounts",
    "View Transaction History",
    "Delete Account",
    "Exit Application",
]


# =============================================================================
# RENDERING
# =============================================================================

def format_money(value: Decimal, symbol: str = "$") -> str:
    """$1,234.50 style; negatives as -$5.00."""
    if not value.is_finite():
        return f"{symbol}{value}"
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def render_header() -> None:
    click.secho("======================================", fg="cyan")
    click.secho("=            BANKCLI PRO v1.0        =", fg="cyan")
    click.secho("======================================", fg="cyan")


def render_menu() -> None:
    for number, label in enumerate(MENU_OPTIONS, start=1):
        click.echo(f"{number}. {label}")


def render_table(head: list[str], rows: list[list[str]]) -> None:
    widths = [
        max(len(cell) for cell in column)
        for column in zip(head, *rows)
    ]
    border = "+" + "+".join("-" * (width + 2) for width in widths) + "+"

    def line(cells: list[str]) -> str:
        return "|" + "|".join(f" {cell.ljust(width)} " for cell, width in zip(cells, widths)) + "|"

    click.echo(border)
    click.echo(line(head))
    click.echo(border)
    for row in rows:
        click.echo(line(row))
    click.echo(border)


def render_account_box(account: Account, symbol: str) -> None:
    lines = [
        f"Account: {account.id}",
        f"Holder: {account.holder_name}",
        f"Balance: {format_money(account.balance, symbol)}",
        f"Opened: {account.created_at.date().isoformat()}",
    ]
    width = max(len(text) for text in lines) + 4
    border = "+" + "-" * (width - 2) + "+"

    click.echo(border)
    for text in lines:
        click.echo(f"| {text.ljust(width - 4)} |")
    click.echo(border)


def error(message: Optional[str]) -> None:
    click.secho(message or "Operation failed.", fg="red")


def ask(question: str) -> str:
    return click.prompt(question, default="", show_default=False, prompt_suffix=" ")


def pause() -> None:
    click.prompt(
        click.style("\nPress Enter to continue...", fg="bright_black"),
        default="",
        show_default=False,
        prompt_suffix="",
    )


def screen(title: str) -> None:
    click.clear()
    render_header()
    click.secho(title, bold=True)


# =============================================================================
# MENU ACTIONS
# =============================================================================

class Session:
    """The menu loop's view of one running ledger."""

    def __init__(self, runner: asyncio.Runner, service: LedgerService, symbol: str):
        self.runner = runner
        self.service = service
        self.symbol = symbol

    def run(self, coro):
        # The loop is idle while the user types; let the last save settle first.
        self.runner.run(self.service.saver.wait_idle())
        return self.runner.run(coro)

    def create_account(self) -> None:
        screen("Create New Account")
        holder_name = ask("Account holder name:")
        initial_deposit = ask("Initial deposit amount:")

        result = self.run(self.service.open_account(holder_name, initial_deposit, create_correlation_id()))
        if not result.success:
            error(result.error_message)
        else:
            click.secho(f"Account created successfully. ID: {result.account.id}", fg="green")
        pause()

    def view_account_details(self) -> None:
        screen("View Account Details")
        result = self.service.get_account(ask("Account ID:"))
        if not result.success:
            error(result.error_message)
        else:
            render_account_box(result.account, self.symbol)
        pause()

    def list_all_accounts(self) -> None:
        screen("All Accounts")
        if len(self.service.store) == 0:
            click.secho("No accounts found.", fg="yellow")
            pause()
            return

        listing = self.service.list_accounts()
        if listing.has_invalid:
            error("Invalid data detected. Some accounts have been filtered.")

        if not listing.accounts:
            click.secho("No valid accounts found.", fg="yellow")
            pause()
            return

        render_table(
            ["ID", "Holder Name", "Balance", "Status"],
            [
                [account.id, account.holder_name, format_money(account.balance, self.symbol), "ACTIVE"]
                for account in listing.accounts
            ],
        )
        click.echo(f"Total accounts: {listing.total_accounts}")
        click.echo(f"Total balance: {format_money(listing.total_balance, self.symbol)}")
        pause()

    def deposit_funds(self) -> None:
        screen("Deposit Funds")
        account_id = ask("Account ID:")
        if not self._require_account(account_id):
            return

        result = self.run(self.service.deposit(account_id, ask("Deposit amount:"), create_correlation_id()))
        if not result.success:
            error(result.error_message)
        else:
            click.secho(
                f"Deposit complete. New balance: {format_money(result.account.balance, self.symbol)}",
                fg="green",
            )
        pause()

    def withdraw_funds(self) -> None:
        screen("Withdraw Funds")
        account_id = ask("Account ID:")
        if not self._require_account(account_id):
            return

        result = self.run(self.service.withdraw(account_id, ask("Withdrawal amount:"), create_correlation_id()))
        if not result.success:
            error(result.error_message)
        else:
            click.secho(
                f"Withdrawal complete. New balance: {format_money(result.account.balance, self.symbol)}",
                fg="green",
            )
        pause()

    def transfer_funds(self) -> None:
        screen("Transfer Between Accounts")
        from_id = ask("From Account ID:")
        to_id = ask("To Account ID:")
        amount = ask("Transfer amount:")

        result = self.run(self.service.transfer(from_id, to_id, amount, create_correlation_id()))
        if not result.success:
            error(result.error_message)
        else:
            click.secho("Transfer completed.", fg="green")
        pause()

    def view_transaction_history(self) -> None:
        screen("Transaction History")
        result = self.service.get_transaction_history(ask("Account ID:"))
        if not result.success:
            error(result.error_message)
        elif not result.transactions:
            click.secho("No transactions found.", fg="yellow")
        else:
            render_table(
                ["Date", "Type", "Amount", "Balance After"],
                [
                    [
                        tx.timestamp.date().isoformat(),
                        tx.type.value,
                        format_money(tx.amount, self.symbol),
                        format_money(tx.balance_after, self.symbol),
                    ]
                    for tx in result.transactions
                ],
            )
        pause()

    def delete_account(self) -> None:
        screen("Delete Account")
        result = self.run(self.service.delete_account(ask("Account ID:"), create_correlation_id()))
        if result.declined:
            click.secho(result.error_message, fg="yellow")
            click.secho(
                "Requires confirmation: Account has remaining balance. Deletion cancelled.",
                fg="yellow",
            )
        elif not result.success:
            error(result.error_message)
        else:
            click.secho("Account deleted.", fg="green")
        pause()

    def _require_account(self, account_id: str) -> bool:
        # Ask for the account before the amount, as a teller would.
        found = self.service.get_account(account_id)
        if not found.success:
            error(found.error_message)
            pause()
            return False
        return True


def run_menu(session: Session) -> None:
    actions: dict[str, Callable[[], None]] = {
        "1": session.create_account,
        "2": session.view_account_details,
        "3": session.list_all_accounts,
        "4": session.deposit_funds,
        "5": session.withdraw_funds,
        "6": session.transfer_funds,
        "7": session.view_transaction_history,
        "8": session.delete_account,
    }

    while True:
        click.clear()
        render_header()
        if session.service.saver.last_error:
            error("Failed to save data.")
        render_menu()

        choice = ask("Select option (1-9):").strip()
        if choice == "9":
            click.secho("Saving and exiting...", fg="cyan")
            return

        action = actions.get(choice)
        if action is None:
            error("Invalid option. Please select 1-9.")
            pause()
            continue
        action()


def _terminate(signum, frame) -> None:
    raise KeyboardInterrupt


@click.command()
@click.option(
    "--data-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Ledger JSON file (default: bank-data.json in the working directory).",
)
@click.option(
    "--audit-log",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append the audit trail to this JSON Lines file.",
)
@click.option(
    "--log-level",
    default=None,
    help="Log level for diagnostics written to stderr.",
)
def cli(data_path: Optional[Path], audit_log: Optional[Path], log_level: Optional[str]) -> None:
    """BankCLI: a small personal account ledger."""
    checks = validate_all_settings()
    problems = [message for name, message in checks.items() if name.endswith("_error")]
    if problems:
        raise click.ClickException("Invalid configuration:\n" + "\n".join(problems))

    settings = get_settings()
    if settings.app.debug_mode:
        configure_logging(log_level or "DEBUG", "console")
    else:
        configure_logging(log_level or settings.app.log_level, settings.app.log_format)
    signal.signal(signal.SIGTERM, _terminate)

    with asyncio.Runner() as runner:
        service, loaded = runner.run(
            create_ledger_service(data_path=data_path, audit_path=audit_log)
        )
        for warning in loaded.warnings:
            click.secho(warning, fg="yellow")
        if loaded.warnings:
            pause()

        session = Session(runner, service, settings.ledger.currency_symbol)
        try:
            run_menu(session)
        except (KeyboardInterrupt, click.Abort):
            click.echo("\n" + click.style("Exiting...", fg="yellow"))
        finally:
            if not runner.run(service.shutdown()):
                error("Failed to save data.")


if __name__ == "__main__":
    cli()
