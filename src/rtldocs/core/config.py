"""Engine configuration: page geometry, fonts and company settings.

Settings come from an optional YAML/JSON file with environment-variable
overrides::

    # rtldocs.yaml
    font_size: 11
    geometry:
      width: 595.28
      height: 841.89
      top_margin: 50
      bottom_margin: 50
    company:
      name: "BEHET"
      phone: "۰۲۱۹۱۰۹۰۰۰۵"
      address: "تهران، ..."
      contractor_name: "صابر سلیمانی"
    fonts:
      persian: ["fonts/Vazirmatn-Regular.ttf"]

Environment overrides: ``RTLDOCS_COMPANY_NAME``, ``RTLDOCS_COMPANY_PHONE``,
``RTLDOCS_COMPANY_ADDRESS``, ``RTLDOCS_FONT_PATH`` (read by the font cache).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, Field

from ..layout.geometry import PageGeometry
from ..generators.styles import Fonts, Layout

_ENV_COMPANY = {
    "name": "RTLDOCS_COMPANY_NAME",
    "phone": "RTLDOCS_COMPANY_PHONE",
    "address": "RTLDOCS_COMPANY_ADDRESS",
}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class CompanySettings(BaseModel):
    """Process-wide company identity merged into every template header.

    Empty fields mean "use the template default".
    """
    name: str = ""
    phone: str = ""
    address: str = ""
    contractor_name: str = ""

    @property
    def has_values(self) -> bool:
        return bool(self.name or self.phone or self.address or self.contractor_name)


class EngineConfig(BaseModel):
    """Everything the engine needs besides the record and the template."""
    geometry: PageGeometry = Field(default_factory=PageGeometry)
    font_size: float = Fonts.BODY_SIZE_PT
    block_spacing: float = Layout.BLOCK_SPACING_PT
    company: CompanySettings = Field(default_factory=CompanySettings)
    fonts: dict[str, list[str]] = Field(default_factory=dict)
    font_dir: Optional[str] = None


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def read_structured_file(path: str | Path) -> dict[str, Any]:
    """Parse a YAML or JSON file into a dict."""
    path = Path(path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = path.read_text(encoding="utf-8")
    if path.suffix == ".json":
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping at the top level")
    return data


def load_config(
    config_path: str | Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> EngineConfig:
    """Load an :class:`EngineConfig` from a file, then apply env overrides."""
    data: dict[str, Any] = read_structured_file(config_path) if config_path else {}
    env = os.environ if env is None else env

    company = dict(data.get("company") or {})
    for key, var in _ENV_COMPANY.items():
        value = env.get(var)
        if value:
            company[key] = value
    data["company"] = company

    return EngineConfig(**data)


DEFAULT_CONFIG = EngineConfig()
