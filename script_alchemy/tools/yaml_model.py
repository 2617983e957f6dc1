"""
Interface to create models with associated .yaml storage.
"""

from pathlib import Path
from typing import Self

import yaml
from pydantic import BaseModel

__all__ = [
    "BaseYamlModel",
]


class BaseYamlModel(BaseModel):
    """
    Base pydantic model which can be loaded from and dumped to a .yaml file.
    """

    @classmethod
    def load_yaml(cls, file: Path) -> Self:
        return cls(**cls.read_yaml(file))

    @staticmethod
    def read_yaml(file: Path) -> dict:
        """
        Read raw mapping from .yaml file without validating it.
        """
        if not file.is_file():
            raise FileNotFoundError(f"Config file does not exist: '{file}'")

        with file.open() as fh:
            model = yaml.safe_load(fh)

        # empty file is an empty config
        if model is None:
            model = {}

        if not isinstance(model, dict):
            raise ValueError(f"Invalid yaml contents: {model}")

        return model

    def dump_yaml(self, file: Path):
        model = self.model_dump(mode="json", exclude_none=True)
        model_yaml = yaml.safe_dump(
            model, default_flow_style=False, sort_keys=False
        )
        file.write_text(model_yaml)
