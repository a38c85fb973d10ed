"""Wipeable user name and password pair.

Typical usage::

    with store.get_credentials(target_app_id) as credentials:
        await client.authenticate(credentials)

The buffers are overwritten with zeros when the ``with`` block is left, on
every exit path. Python strings cannot be cleared, so the values are kept in
``bytearray`` objects and exposed only as encoded bytes.
"""


class ScopedCredentials:
    """Owns a user name and a password and clears them on exit."""

    def __init__(self, name: bytes | bytearray | str, password: bytes | bytearray | str) -> None:
        self._name = self._to_buffer(name)
        self._password = self._to_buffer(password)

    @staticmethod
    def _to_buffer(value: bytes | bytearray | str) -> bytearray:
        if isinstance(value, str):
            return bytearray(value.encode("utf-8"))
        return bytearray(value)

    @property
    def name(self) -> bytearray:
        """UTF-8 encoded user name. Even the name should be kept secret."""
        return self._name

    @property
    def password(self) -> bytearray:
        """UTF-8 encoded password."""
        return self._password

    @property
    def is_wiped(self) -> bool:
        return not self._name and not self._password

    def wipe(self) -> None:
        """Overwrite both buffers with zeros and empty them."""
        for buffer in (self._name, self._password):
            for i in range(len(buffer)):
                buffer[i] = 0
            buffer.clear()

    def __enter__(self) -> "ScopedCredentials":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return "ScopedCredentials(name=***, password=***)"
