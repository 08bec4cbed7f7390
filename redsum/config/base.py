"""Base configuration model and TOML loader."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

ConfigT = TypeVar("ConfigT", bound="BaseConfig")


class BaseConfig(BaseModel):
    """Strict base model shared by every configuration section."""

    model_config = ConfigDict(extra="forbid", frozen=True)


def load_config(model: type[ConfigT], path: Path) -> ConfigT:
    """Load ``path`` as TOML and validate it against ``model``.

    Raises :class:`FileNotFoundError` when the file does not exist and
    :class:`ValueError` when it is not valid TOML. Validation errors surface
    as :class:`pydantic.ValidationError`.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    try:
        with path.open("rb") as fp:
            data = tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    return model.model_validate(data)


__all__ = ["BaseConfig", "load_config"]
