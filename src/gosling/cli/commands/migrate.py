"""Up/down commands for gosling CLI."""

from ...core.types import RunResult
from ...services import ServiceContainer


def handle_up(args, services: ServiceContainer) -> None:
    """Apply all pending migrations."""
    _print_results(services.migrate.up())


def handle_up_by_one(args, services: ServiceContainer) -> None:
    """Apply the next pending migration."""
    result = services.migrate.up_by_one()
    _print_results([result] if result else [])


def handle_up_to(args, services: ServiceContainer) -> None:
    """Apply pending migrations up to args.version."""
    _print_results(services.migrate.up_to(args.version))


def handle_down(args, services: ServiceContainer) -> None:
    """Revert the current migration."""
    result = services.migrate.down()
    _print_results([result] if result else [])


def handle_down_to(args, services: ServiceContainer) -> None:
    """Revert migrations down to args.version."""
    _print_results(services.migrate.down_to(args.version))


def handle_redo(args, services: ServiceContainer) -> None:
    """Revert and re-apply the current migration."""
    results = services.migrate.redo()
    _print_results(list(results) if results else [])


def handle_reset(args, services: ServiceContainer) -> None:
    """Revert every applied migration."""
    _print_results(services.migrate.reset())


def _print_results(results: list[RunResult]) -> None:
    """Print one line per migration run.

    Args:
        results: Results of the runs, in execution order.
    """
    if not results:
        print("No migrations to run.")
        return

    for result in results:
        label = "EMPTY" if result.empty else "OK"
        print(
            f"{label:<6}{result.direction.value:<5} {result.source} "
            f"({result.duration_ms:.1f}ms)"
        )
