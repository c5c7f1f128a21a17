import typer
from pathlib import Path
from typing import Optional
from datetime import datetime

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from expense_predictor.config.settings import ConfigLoader
from expense_predictor.logging_setup import configure_logging
from expense_predictor.parsers.base import ParseResult
from expense_predictor.parsers.factory import ParserFactory
from expense_predictor.services.evaluation_service import EvaluationService

app = typer.Typer(
    name="expense-predictor",
    help="Predict the category of new transactions from your categorized history",
    add_completion=False,
)

console = Console()

class State:
    verbose: bool = False
    config: Optional[dict] = None
    service: Optional[EvaluationService] = None


state = State()

@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable verbose output",
    )
):
    """
    Expense Predictor - Rank likely categories for new transactions.
    """
    configure_logging("DEBUG" if verbose else None)

    if state.service is None:
        state.config = ConfigLoader.load_predictor_config()
        state.service = EvaluationService(config=state.config)

    state.verbose = verbose


def _load_ledger(filepath: Path, ledger_format: Optional[str]) -> ParseResult:
    if ledger_format:
        parser = ParserFactory.create_parser(ledger_format)
    else:
        parser = ParserFactory.for_file(str(filepath))

    result = parser.parse(str(filepath))
    if result.errors:
        console.print(f"[yellow]Skipped {result.errors} malformed records[/yellow]")
        if state.verbose:
            for message in result.error_messages:
                console.print(f"[dim]  {message}[/dim]")
    return result


def _fmt(value: Optional[float]) -> str:
    return "-" if value is None else f"{value:.3f}"


@app.command(name="predict")
def predict(
    filepath: Path = typer.Argument(
        ...,
        help="Path to the categorized transaction ledger",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    txn_date: str = typer.Option(
        ...,
        "--date", "-d",
        help="Date of the new transaction (configured format, dd.mm.yyyy by default)",
    ),
    amount: float = typer.Option(
        ...,
        "--amount", "-a",
        help="Amount of the new transaction",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top", "-k",
        help="Number of categories to show (0 for all)",
        min=0,
    ),
    ledger_format: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help="Ledger format (tsv, csv). Guessed from the extension by default",
    ),
):
    """
    Rank the likely categories of a new transaction.

    Examples:
        expense-predictor predict transactions.txt --date 12.03.2019 --amount 450
        expense-predictor predict ledger.csv -d 12.03.2019 -a 450 --top 5
    """
    try:
        candidate_date = datetime.strptime(txn_date, state.config["date_format"]).date()
        history = _load_ledger(filepath, ledger_format)

        ranking = state.service.predict(
            history.transactions,
            candidate_date=candidate_date,
            candidate_amount=amount,
            top_k=top,
        )

        if not ranking:
            console.print(Panel(
                "[yellow]No category has enough history to make a prediction[/yellow]",
                title="No Prediction",
                border_style="yellow",
            ))
            return

        table = Table(title=f"Predictions for {amount:,.2f} on {candidate_date}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Category", style="cyan", no_wrap=True)
        table.add_column("Coefficient", justify="right", style="bold")
        table.add_column("N", justify="right")
        table.add_column("Rate deviation", justify="right")
        table.add_column("Nearest diff", justify="right")
        table.add_column("2nd nearest diff", justify="right")

        for position, entry in enumerate(ranking, start=1):
            prediction = entry.prediction
            table.add_row(
                str(position),
                entry.category,
                f"{entry.coefficient:.4f}",
                str(prediction.count),
                _fmt(prediction.expense_rate_deviation),
                _fmt(prediction.nearest_amount_diff),
                _fmt(prediction.second_nearest_amount_diff),
            )

        console.print(table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)


@app.command(name="evaluate")
def evaluate(
    filepath: Path = typer.Argument(
        ...,
        help="Path to the categorized transaction ledger",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    warmup: Optional[int] = typer.Option(
        None,
        "--warmup", "-w",
        help="Leading transactions to ingest without evaluating",
        min=0,
    ),
    top_k: Optional[int] = typer.Option(
        None,
        "--top-k", "-k",
        help="How many top categories count as a correct prediction",
        min=1,
    ),
    show_misses: bool = typer.Option(
        False,
        "--show-misses",
        help="Print every missed transaction with its top categories",
    ),
    ledger_format: Optional[str] = typer.Option(
        None,
        "--format", "-f",
        help="Ledger format (tsv, csv). Guessed from the extension by default",
    ),
):
    """
    Replay a ledger and measure how often the true category is predicted.

    Examples:
        expense-predictor evaluate transactions.txt
        expense-predictor evaluate transactions.txt --warmup 100 --top-k 1
    """
    try:
        history = _load_ledger(filepath, ledger_format)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Replaying transactions...", total=None)

            result = state.service.evaluate(history.transactions, warmup=warmup, top_k=top_k)

            progress.update(task, completed=True)

        if show_misses:
            for miss in result.misses:
                console.print(f"[red]{miss.transaction}[/red]")
                for entry in miss.top:
                    console.print(f"  {entry}")
                console.print("")

        summary_text = (
            f"[bold]Transactions:[/bold] {result.total} "
            f"({result.evaluated} evaluated)\n\n"
            f"[green]Correct predictions (top {result.top_k}):[/green] "
            f"{result.correct} ({result.hit_rate:.1%})\n"
            f"[cyan]Precise predictions:[/cyan] "
            f"{result.precise} ({result.precision_rate:.1%})"
        )
        if result.errors:
            summary_text += f"\n[yellow]Skipped out-of-order:[/yellow] {result.errors}"

        console.print(Panel(
            summary_text,
            title="[bold]Evaluation Summary[/bold]",
            border_style="cyan",
            padding=(1, 2),
        ))
        console.print(f"[dim]Categories: {', '.join(result.categories)}[/dim]")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        if state.verbose:
            console.print_exception()
        raise typer.Exit(code=1)


def cli_main():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    cli_main()
