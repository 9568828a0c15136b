UNAUTHENTICATED_WRITE_PREFIX = "unauthenticated_write_"


UNAUTHENTICATED_READ_PREFIX = "unauthenticated_read_"


WRITE_PREFIX = "write_"


READ_PREFIX = "read_"


def get_implied_scopes(scopes):
    """Granting write_x also grants read_x."""
    implied_scopes = set()
    for scope in scopes:
        if scope.startswith(UNAUTHENTICATED_WRITE_PREFIX):
            implied_scopes.add(
                UNAUTHENTICATED_READ_PREFIX
                + scope.removeprefix(UNAUTHENTICATED_WRITE_PREFIX)
            )
        elif scope.startswith(WRITE_PREFIX):
            implied_scopes.add(READ_PREFIX + scope.removeprefix(WRITE_PREFIX))
    return implied_scopes


def split_scopes(scope_str):
    return [scope.strip() for scope in (scope_str or "").split(",") if scope.strip()]


def get_missing_scopes(granted_scopes, requested_scopes):
    """
    Requested scopes the grant does not cover, in request order.

    The merchant can deselect optional scopes on the grant screen so
    what we asked for is not always what we got.
    """
    granted = set(granted_scopes).union(get_implied_scopes(granted_scopes))
    return [scope for scope in requested_scopes if scope not in granted]
