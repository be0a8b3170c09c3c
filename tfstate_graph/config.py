"""Application configuration and settings."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


DEFAULT_DATASTORE_URL = "http://burrito-datastore.burrito-system"
DEFAULT_TOKEN_PATH = "/var/run/secrets/token/burrito"
DEFAULT_OUTPUT_DIR = "state-graph-output"
OUTPUT_FORMATS = ("json", "yaml")


class Settings(BaseModel):
    """Runtime settings resolved from env vars and CLI flags."""

    # Datastore
    datastore_url: str = Field(
        default_factory=lambda: os.environ.get("TFSTATE_GRAPH_DATASTORE_URL", DEFAULT_DATASTORE_URL),
        description="Base URL of the datastore that stores graphs per layer.",
    )
    datastore_token_path: str = Field(
        default_factory=lambda: os.environ.get(
            "TFSTATE_GRAPH_DATASTORE_TOKEN_PATH", DEFAULT_TOKEN_PATH
        ),
        description="File holding the Authorization header value for the datastore.",
    )

    # Output
    output_dir: str = DEFAULT_OUTPUT_DIR
    output_format: str = "json"  # json | yaml

    # Behaviour
    verbose: bool = False

    @property
    def resolved_output_dir(self) -> Path:
        return Path(self.output_dir).resolve()

    def validate_output_format(self) -> None:
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format {self.output_format!r}. "
                f"Choose one of: {', '.join(OUTPUT_FORMATS)}."
            )
