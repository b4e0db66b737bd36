"""Status and version commands for gosling CLI."""

from ...services import ServiceContainer


def handle_status(args, services: ServiceContainer) -> None:
    """Print the applied state of every migration."""
    statuses = services.migrate.status()

    print(f"{'Applied At':<24} Migration")
    print("=" * 50)
    if not statuses:
        print("No migrations found.")
        return

    for status in statuses:
        if status.applied:
            applied_at = (
                status.applied_at.strftime("%Y-%m-%d %H:%M:%S")
                if status.applied_at
                else "yes"
            )
        else:
            applied_at = "Pending"
        print(f"{applied_at:<24} {status.source}")


def handle_version(args, services: ServiceContainer) -> None:
    """Print the current database version."""
    print(f"gosling: version {services.migrate.version()}")
