"""Maps authenticated users of the calling portal to Livelink login names.

Users are usually synchronized from the Windows domain to Livelink and their
names are transformed by a predictable pattern. The following converts
``MYDOMAIN\\MyUser`` to ``myuser@mycompany.com``::

    mapper = LoginMapper("{user:lc}@mycompany.com")
    login = mapper.get_login_name("MYDOMAIN\\MyUser")

Placeholders are enclosed in braces and matched case-insensitively:

    {login}  - complete login name; with the domain if provided.
    {user}   - only user name; without the domain.
    {domain} - only the domain name; empty if no domain is provided.

A placeholder may carry the modifier ``:lc`` or ``:uc`` to convert the value
to lower-case or upper-case. Unrecognized placeholders are left intact.
"""

import re


def replace_parameter(text: str, name: str, value: str) -> str:
    """Replace all occurrences of the placeholder ``name`` in ``text``.

    Args:
        text (str): Text with placeholders.
        name (str): Placeholder name without braces and modifiers.
        value (str): Replacement value.

    Returns:
        str: The text with ``{name}``, ``{name:lc}`` and ``{name:uc}`` resolved.
    """
    pattern = re.compile(r"\{" + re.escape(name) + r"(:lc|:uc)?\}", re.IGNORECASE)

    def resolve(match: re.Match) -> str:
        modifier = (match.group(1) or "").lower()
        if modifier == ":lc":
            return value.lower()
        if modifier == ":uc":
            return value.upper()
        return value

    return pattern.sub(resolve, text)


class LoginMapper:
    """Computes Livelink login names from portal user names by a pattern."""

    def __init__(self, pattern: str) -> None:
        if not pattern:
            raise ValueError("Login pattern must not be empty.")
        self._pattern = pattern

    def get_login_name(self, user_login: str) -> str:
        """Return the Livelink login name the specified portal user maps to.

        Args:
            user_login (str): Either a plain user name or ``DOMAIN\\user``.

        Returns:
            str: The login name produced by the pattern.
        """
        if not user_login:
            raise ValueError("User login must not be empty.")
        domain, _, name = user_login.rpartition("\\")
        result = replace_parameter(self._pattern, "login", user_login)
        result = replace_parameter(result, "user", name)
        return replace_parameter(result, "domain", domain)
