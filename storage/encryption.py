"""At-rest encryption for stored API keys."""

import logging
import os
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from core.errors import ConfigError

logger = logging.getLogger(__name__)


class SecretCipher:
    """Fernet wrapper used to encrypt credential secrets before storage."""

    def __init__(self, key: str):
        try:
            self._fernet = Fernet(key.encode())
        except (ValueError, TypeError) as e:
            raise ConfigError(
                f"Invalid encryption key format: {e}. Generate one with "
                "`python -c \"from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())\"`"
            ) from e

    @classmethod
    def from_env(cls, env_var: str) -> Optional["SecretCipher"]:
        """Build a cipher from an environment variable, or None if it is unset."""
        key = os.getenv(env_var)
        if not key:
            logger.debug(f"{env_var} not set; API keys are stored without encryption")
            return None
        return cls(key)

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode()).decode()

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a stored secret.

        Raises:
            ConfigError: If the secret was written with a different key.
        """
        try:
            return self._fernet.decrypt(ciphertext.encode()).decode()
        except InvalidToken as e:
            raise ConfigError("Stored API key could not be decrypted with the configured key") from e
