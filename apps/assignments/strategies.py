"""
Assignment strategies.

Each strategy is a pure predicate deciding whether the template at
task_index goes to the user at user_index. The engine evaluates it for
every (user, template) pair, users in the outer loop and templates in
the inner one.

Arguments passed to every strategy:
- user_index: Position of the user in the roster
- task_index: Position of the template in the daily catalog
- user_count: Roster size (always > 0)
- current_load: Daily tasks already assigned to this user for today
- min_load: Lowest current_load over the roster, computed once per batch
"""


def distribute(user_index, task_index, user_count, current_load, min_load):
    """
    (user_index + task_index) % user_count == user_index

    This reduces to task_index % user_count == 0: only templates whose
    index is a multiple of the roster size are assigned, and each of those
    goes to every user. The formula is kept as-is.
    """
    return (user_index + task_index) % user_count == user_index


def round_robin(user_index, task_index, user_count, current_load, min_load):
    """Each template goes to exactly one user: task_index % user_count."""
    return task_index % user_count == user_index


def load_balance(user_index, task_index, user_count, current_load, min_load):
    """
    Users at the minimum load receive every template.

    min_load is not updated as the batch creates tasks, so users tied at
    the minimum all receive the same templates in one run.
    """
    return current_load <= min_load


STRATEGIES = {
    'distribute': distribute,
    'round-robin': round_robin,
    'load-balance': load_balance,
}


def get_strategy(name):
    """
    Look up a strategy by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return STRATEGIES[str(name)]
    except KeyError:
        raise ValueError(
            f"Unknown assignment strategy '{name}'. "
            f"Choose one of: {', '.join(STRATEGIES)}"
        ) from None
