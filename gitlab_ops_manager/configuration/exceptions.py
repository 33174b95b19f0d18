"""Contains exceptions raised when reconciling application configuration."""


class GitLabConnectionConfigurationUndefinedError(Exception):
    """Raised when the GitLab connection configuration is undefined or incomplete."""

    pass


class InvalidConfigurationElementError(Exception):
    """Raised when a configuration element has an invalid value."""

    def __init__(self, name: str, cli_name: str, env_name: str, value: object, reason: str) -> None:
        """Initializes the exception with the name of the invalid element."""
        super().__init__(
            f"Invalid value {value!r} for {name} (command line option {cli_name}, environment variable {env_name}): {reason}"
        )
        self.name = name
        self.cli_name = cli_name
        self.env_name = env_name
        self.value = value
