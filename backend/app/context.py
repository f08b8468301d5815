import uuid


class AuthenticatedUser:
    """
    The caller of a request, as verified by the identity provider.

    ``id`` is the account id every row-level policy compares against. An
    instance is created per request by ``app.auth.get_current_user`` and
    handed explicitly to every service function.
    """

    def __init__(self, id: uuid.UUID, uid: str, email: str | None = None, name: str | None = None):
        self.id = id
        self.uid = uid
        self.email = email
        self.name = name

    def __repr__(self):
        return f"AuthenticatedUser(id={self.id}, uid={self.uid}, email={self.email})"
