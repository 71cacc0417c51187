"""
REPL Bridge Configuration - Global settings with environment variable overrides.

Configuration precedence (highest to lowest):
1. Explicit arguments to BridgeConfig
2. Environment variables (REPLBRIDGE_COMMAND, etc.)
3. Default values defined here

The configuration is validated once, when it is created. Chunk patterns are
compiled at that point and never re-parsed afterwards.
"""

import os
import shlex
from dataclasses import dataclass, field
from typing import List, Optional

from replbridge.exceptions import ConfigurationError
from replbridge.document.patterns import ChunkPattern


MIN_WIDTH = 30
MAX_WIDTH = 300


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class BridgeConfig:
    """
    Bridge configuration with environment variable overrides.

    Example:
        # Load from environment
        config = BridgeConfig.from_env()

        # Or create with explicit values
        config = BridgeConfig(
            command="python3 -i -q",
            source_template="exec(open('{path}').read())",
            temp_suffix=".py",
        )
    """

    # REPL invocation
    command: str = "R --no-save --quiet"
    width: int = 80

    # Chunk delimiters (R Markdown / Quarto fences by default)
    chunk_start: str = r"^\s*```\s*\{"
    chunk_end: str = r"^\s*```\s*$"

    # Temp-file sourcing
    source_template: str = "source('{path}', echo=TRUE)"
    temp_suffix: str = ".R"

    # Pause between line-by-line sends (seconds)
    settle_delay: float = 0.05

    # Consumed only by key-binding layers
    disable_default_mappings: bool = False

    chunk_pattern: ChunkPattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check every setting and compile the chunk patterns.

        Raises:
            ConfigurationError: If any setting is unusable
        """
        if not self.argv:
            raise ConfigurationError("REPL command is empty")
        if not MIN_WIDTH <= self.width <= MAX_WIDTH:
            raise ConfigurationError(
                f"View width {self.width} outside [{MIN_WIDTH}, {MAX_WIDTH}]"
            )
        if "{path}" not in self.source_template:
            raise ConfigurationError(
                f"Source template must contain '{{path}}': {self.source_template!r}"
            )
        if self.settle_delay < 0:
            raise ConfigurationError("Settle delay must not be negative")
        self.chunk_pattern = ChunkPattern.compile(self.chunk_start, self.chunk_end)

    @property
    def argv(self) -> List[str]:
        """REPL command split into arguments."""
        try:
            return shlex.split(self.command)
        except ValueError as e:
            raise ConfigurationError(f"Cannot parse REPL command {self.command!r}: {e}") from e

    @property
    def executable(self) -> str:
        return self.argv[0]

    def source_command(self, path: str) -> str:
        """
        Build the command that sources a temp file with echo.

        Only the `{path}` placeholder is substituted; other braces are kept.
        """
        return self.source_template.replace("{path}", path)

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - REPLBRIDGE_COMMAND: REPL command line
        - REPLBRIDGE_WIDTH: Width of the REPL view (30-300)
        - REPLBRIDGE_CHUNK_START: Regex matching a chunk's opening line
        - REPLBRIDGE_CHUNK_END: Regex matching a chunk's closing line
        - REPLBRIDGE_SOURCE_TEMPLATE: Command used to source a temp file
        - REPLBRIDGE_TEMP_SUFFIX: Suffix of the temp source file
        - REPLBRIDGE_SETTLE_DELAY: Seconds between line-by-line sends
        - REPLBRIDGE_NO_DEFAULT_MAPPINGS: Disable default key bindings
        """
        try:
            width = int(os.getenv("REPLBRIDGE_WIDTH", cls.width))
            settle_delay = float(os.getenv("REPLBRIDGE_SETTLE_DELAY", cls.settle_delay))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            command=os.getenv("REPLBRIDGE_COMMAND", cls.command),
            width=width,
            chunk_start=os.getenv("REPLBRIDGE_CHUNK_START", cls.chunk_start),
            chunk_end=os.getenv("REPLBRIDGE_CHUNK_END", cls.chunk_end),
            source_template=os.getenv("REPLBRIDGE_SOURCE_TEMPLATE", cls.source_template),
            temp_suffix=os.getenv("REPLBRIDGE_TEMP_SUFFIX", cls.temp_suffix),
            settle_delay=settle_delay,
            disable_default_mappings=_env_flag("REPLBRIDGE_NO_DEFAULT_MAPPINGS"),
        )


# Global default config instance
_default_config: Optional[BridgeConfig] = None


def get_config() -> BridgeConfig:
    """Get the global default configuration, loading from env if needed."""
    global _default_config
    if _default_config is None:
        _default_config = BridgeConfig.from_env()
    return _default_config


def set_config(config: BridgeConfig) -> None:
    """Set the global default configuration."""
    global _default_config
    _default_config = config
