"""
Loan Explainer Command Line Interface

Provides CLI commands for inspecting model bundles and scoring
loan applications with explanations.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="loan-explainer",
    help="Explainable loan approval scoring CLI",
    add_completion=False,
)
console = Console()


def _load_bundle(path: Optional[Path]):
    """Load the bundle at path, or the configured one."""
    from loan_explainer.core.errors import BundleIntegrityError
    from loan_explainer.data import get_model_bundle, load_model_bundle

    try:
        return load_model_bundle(path) if path else get_model_bundle()
    except BundleIntegrityError as e:
        console.print(f"[red]Error loading model bundle: {e.message}[/red]")
        raise typer.Exit(1)


@app.command()
def version():
    """Show application version."""
    from loan_explainer import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration."""
    from loan_explainer.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Loan Explainer Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Model Bundle", str(settings.model.bundle_path))
    table.add_row("SHAP Samples", str(settings.explainer.shap_num_samples))
    table.add_row("LIME Perturbations", str(settings.explainer.lime_num_perturbations))
    table.add_row("LIME Noise Scale", str(settings.explainer.lime_noise_scale))
    table.add_row("Random Seed", str(settings.explainer.random_seed))
    table.add_row("Worker Threads", str(settings.explainer.max_workers))
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def inspect_bundle(
    path: Path = typer.Argument(..., help="Path to a model bundle JSON file"),
    top_n: int = typer.Option(10, "--top", "-n", help="Number of largest weights to show"),
):
    """Validate a model bundle and summarize it."""
    bundle = _load_bundle(path)

    console.print(f"[green]✓ Bundle is valid:[/green] {path}")
    console.print(f"  Features: [cyan]{bundle.n_features}[/cyan]")
    console.print(f"  Bias: [cyan]{bundle.bias:.4f}[/cyan]")
    console.print(f"  Background samples: [cyan]{len(bundle.background)}[/cyan]")

    ranked = sorted(
        zip(bundle.feature_names, bundle.weights),
        key=lambda item: abs(item[1]),
        reverse=True,
    )[:top_n]

    table = Table(title=f"Top {len(ranked)} Weights")
    table.add_column("Feature", style="cyan")
    table.add_column("Weight", justify="right")

    for name, weight in ranked:
        color = "green" if weight > 0 else "red"
        table.add_row(name, f"[{color}]{weight:+.4f}[/{color}]")

    console.print(table)


@app.command()
def predict(
    record_file: Path = typer.Argument(..., help="JSON file with the application fields"),
    bundle_path: Optional[Path] = typer.Option(None, "--bundle", "-b", help="Model bundle to use"),
    seed: Optional[int] = typer.Option(None, "--seed", "-s", help="Seed for reproducible explanations"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON response"),
):
    """Score a loan application and explain the decision."""
    from loan_explainer.core.errors import PredictionError
    from loan_explainer.core.prediction import PredictionEngine

    if not record_file.exists():
        console.print(f"[red]Error: File not found: {record_file}[/red]")
        raise typer.Exit(1)

    try:
        record = json.loads(record_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error parsing application record: {e}[/red]")
        raise typer.Exit(1)

    if not isinstance(record, dict):
        console.print("[red]Error: Application record must be a JSON object[/red]")
        raise typer.Exit(1)

    bundle = _load_bundle(bundle_path)

    try:
        engine = PredictionEngine.from_settings(bundle)
        result = engine.predict(record, seed=seed)
    except PredictionError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    response = result.to_dict()

    if as_json:
        typer.echo(json.dumps(response, indent=2))
        return

    color = "green" if response["prediction"] == "APPROVED" else "red"
    console.print(
        f"\n[bold]Decision:[/bold] [{color}]{response['prediction']}[/{color}] "
        f"(probability {response['probability']:.1%}, confidence {response['confidence']:.1f}%)"
    )

    if "explanations" in response:
        table = Table(title="Main Factors Against Approval")
        table.add_column("Feature", style="cyan")
        table.add_column("Contribution", justify="right")
        table.add_column("Reason")
        for item in response["explanations"]:
            table.add_row(item["feature"], f"{item['contribution']:+.3f}", item["reason"])
        console.print(table)

        if response["suggestions"]:
            console.print("\n[bold]Suggestions:[/bold]")
            for s in response["suggestions"]:
                console.print(f"  • [yellow]{s['category']}[/yellow] ({s['priority']}): {s['action']}")
                console.print(f"    [dim]{s['details']}[/dim]")
    else:
        console.print("\n[bold]Main Factors For Approval:[/bold]")
        for factor in response["positive_factors"]:
            console.print(f"  • {factor['feature']} [green]{factor['contribution']:+.3f}[/green]")

    summary = response["feature_importance_summary"]
    if any(summary.values()):
        console.print("\n[bold]Feature Importance Summary:[/bold]")
        console.print(f"  SHAP positive: {', '.join(summary['top_positive_shap']) or '-'}")
        console.print(f"  SHAP negative: {', '.join(summary['top_negative_shap']) or '-'}")
        console.print(f"  LIME most sensitive: {', '.join(summary['most_sensitive_lime']) or '-'}")


if __name__ == "__main__":
    app()
