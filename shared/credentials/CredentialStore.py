from shared.credentials.Credentials import ScopedCredentials
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import CredentialError


class CredentialStore:
    """
    Resolves the credentials of a Livelink system administrator for a target application.

    A search impersonated for another user must be performed by an account
    allowed to impersonate. The account is configured per target application
    in the environment:

        CREDENTIALS_<TARGET_APP_ID>_USERNAME
        CREDENTIALS_<TARGET_APP_ID>_PASSWORD

    Characters of the ID other than letters and digits are replaced by underscores.
    """

    def __init__(self, helper_config: HelperConfig):
        self._helper_config = helper_config
        self.logging = helper_config.get_logger()

    def get_credentials(self, target_app_id: str) -> ScopedCredentials:
        """
        Returns fresh credentials for the target application. The caller owns them and must wipe them.

        Args:
            target_app_id (str): The identifier of the target application.

        Returns:
            ScopedCredentials: The user name and password of the target application.

        Raises:
            CredentialError: If the target application ID is empty or the user name or password is not configured.
        """
        if not target_app_id:
            raise CredentialError("Target application ID was empty.")
        name = self._read(target_app_id, "USERNAME")
        if not name:
            raise CredentialError("User name credential for the target application was empty.")
        password = self._read(target_app_id, "PASSWORD")
        if not password:
            raise CredentialError("Password credential for the target application was empty.")
        self.logging.debug("Resolved credentials for target application %r.", target_app_id)
        return ScopedCredentials(name, password)

    def _read(self, target_app_id: str, kind: str) -> str:
        return self._helper_config.get_string_val(f"CREDENTIALS_{target_app_id}_{kind}", default="")
