from stellar_workshop.workflows.runner import (
    Clients,
    build_clients,
    main,
    poll_policy,
    run_with_boundary,
)

__all__ = [
    "Clients",
    "build_clients",
    "main",
    "poll_policy",
    "run_with_boundary",
]
