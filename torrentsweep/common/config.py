import os
from pathlib import Path

from torrentsweep.bencode.decoder import DEFAULT_MAX_DEPTH, check_max_depth

DEFAULT_LOG_DIR = Path("data") / "logs"
DEFAULT_LOG_FILE = "torrentsweep.log.jsonl"

ENV_MAX_DEPTH = "TORRENTSWEEP_MAX_DEPTH"
ENV_LOG_DIR = "TORRENTSWEEP_LOG_DIR"


class Settings:
    __slots__ = ("max_depth", "log_dir", "log_file", "verbose")

    def __init__(
        self,
        max_depth: int = DEFAULT_MAX_DEPTH,
        log_dir: Path = DEFAULT_LOG_DIR,
        log_file: str = DEFAULT_LOG_FILE,
        verbose: bool = False,
    ):
        check_max_depth(max_depth)
        self.max_depth = max_depth
        self.log_dir = log_dir
        self.log_file = log_file
        self.verbose = verbose

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        settings = cls()
        if raw := environ.get(ENV_MAX_DEPTH):
            try:
                settings.max_depth = int(raw)
            except ValueError:
                raise ValueError(f"{ENV_MAX_DEPTH} must be an integer, got {raw!r}") from None
            check_max_depth(settings.max_depth, ENV_MAX_DEPTH)
        if raw := environ.get(ENV_LOG_DIR):
            settings.log_dir = Path(raw)
        return settings

    def apply_args(self, args) -> "Settings":
        """Let command-line flags override whatever the environment set."""
        if getattr(args, "max_depth", None) is not None:
            check_max_depth(args.max_depth, "--max-depth")
            self.max_depth = args.max_depth
        if getattr(args, "log_file", None) is not None:
            self.log_file = args.log_file
        if getattr(args, "verbose", False):
            self.verbose = True
        return self
