# ABOUTME: Ordering of guards in the request pipeline
# ABOUTME: Lower values run first, with gaps left for custom guards between the built-in ones

from enum import IntEnum


class GuardPriority(IntEnum):
    """
    Execution order of request guards. Lower runs first.

    Admission control runs before authentication so rejected callers never
    cost a signature check; authentication runs before authorization because
    scopes come from the verified token.
    """

    FIRST = 0
    RATE_LIMIT = 100
    AUTHENTICATION = 200
    AUTHORIZATION = 300
    NORMAL = 500
    LAST = 1000
