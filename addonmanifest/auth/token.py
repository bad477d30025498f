import os

from dotenv import load_dotenv


class TokenProvider:
    """
    Resolves the GitHub API token from an explicit value or the environment
    (optionally loaded from .env).

    Lookup order: explicit value, INPUT_TOKEN (GitHub Actions input),
    GITHUB_TOKEN. A value of the form ``${NAME}`` is expanded from the
    environment. An empty result means unauthenticated requests.
    """

    ENV_KEYS = ("INPUT_TOKEN", "GITHUB_TOKEN")

    def __init__(self, explicit: str | None = None, use_dotenv: bool = True) -> None:
        """
        :param explicit: Token given on the command line or by the caller.
        :param use_dotenv: Load a .env file into the environment first.
        """
        if use_dotenv:
            load_dotenv()
        self.explicit = explicit

    # --------------------------------------------------------------------- #
    # Helper: expand ${NAME} references
    # --------------------------------------------------------------------- #
    @staticmethod
    def _expand(value: str | None) -> str | None:
        if value and value.startswith("${") and value.endswith("}"):
            value = os.getenv(value[2:-1])
        return value or None

    # --------------------------------------------------------------------- #
    # Public getter
    # --------------------------------------------------------------------- #
    def get_token(self) -> str | None:
        token = self._expand(self.explicit)
        if token:
            return token
        for key in self.ENV_KEYS:
            token = self._expand(os.getenv(key))
            if token:
                return token
        return None


def get_github_token(explicit: str | None = None) -> str | None:
    """Return the GitHub token to use, or None for anonymous access."""
    return TokenProvider(explicit).get_token()
