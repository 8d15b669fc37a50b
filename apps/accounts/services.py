"""
Service layer for accounts app.

Services:
- get_eligible_users: Current roster of users who receive auto-assigned tasks
"""

from .models import User


def get_eligible_users():
    """
    Return the roster of regular assignees.

    Only active users with the 'user' role are eligible; admins never
    receive auto-assigned work. The order is stable for a given set of
    users (name, then id) because strategies depend on roster position.

    The roster is re-read on every call so additions and deactivations
    are picked up by the next batch.

    Returns:
        list of User instances
    """
    return list(
        User.objects.filter(role=User.Role.USER, is_active=True)
        .order_by('first_name', 'last_name', 'id')
    )

