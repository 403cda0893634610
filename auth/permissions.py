from utils.errors import Unauthorized


def require_actor(actor):
    """Operations that act on behalf of someone need an authenticated user"""
    if actor is None:
        raise Unauthorized('Authentication required')
    return actor


def require_admin(actor):
    require_actor(actor)
    if not actor.is_admin:
        raise Unauthorized('Admin access required')
    return actor
