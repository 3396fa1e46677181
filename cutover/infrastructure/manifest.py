"""
Manifest Reader

Architectural Intent:
- Reads the application name out of a Cloud Foundry manifest so the CLI can
  accept a manifest without an explicit app name
- Only the name is read; the manifest itself is handed to cf push untouched
"""

from __future__ import annotations
from pathlib import Path
from typing import Optional
import yaml
from cutover.domain.errors import ManifestError


def read_app_name(manifest_path: str) -> Optional[str]:
    """Return the name of the first application in the manifest, or None."""
    path = Path(manifest_path)
    try:
        with open(path) as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ManifestError(f"Could not read manifest {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid manifest {path}: {e}") from e

    if not isinstance(document, dict):
        return None

    applications = document.get("applications")
    if isinstance(applications, list):
        for app in applications:
            if isinstance(app, dict) and app.get("name"):
                return str(app["name"])
        return None

    # legacy single-app manifests keep the name at the top level
    name = document.get("name")
    return str(name) if name else None
