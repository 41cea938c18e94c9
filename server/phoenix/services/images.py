"""Derived service fields: logo identifier and themed logo resolution."""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

from phoenix.constants import LOGO_EXTENSIONS, LOGO_URL_PREFIX
from phoenix.core.config import Settings

_NON_ALPHANUM = re.compile(r"[^0-9a-zA-Z]")


def filter_alpha_num(value: str) -> str:
    """Lower-cased ``value`` with everything but ASCII letters and digits removed."""
    return _NON_ALPHANUM.sub("", value or "").lower()


@dataclass(frozen=True)
class LogoResolution:
    nice_service: str
    image: str
    has_image: bool


def resolve_logo(logo_directory: Path, nice_service: str) -> LogoResolution:
    """Probe ``<dir>/<nice>.svg`` then ``<dir>/<nice>.png``.

    The image path falls back to ``.png`` when neither file exists, in
    which case ``has_image`` is False.
    """
    for extension in LOGO_EXTENSIONS:
        if (logo_directory / f"{nice_service}{extension}").is_file():
            return LogoResolution(nice_service, f"{LOGO_URL_PREFIX}{nice_service}{extension}", True)
    return LogoResolution(nice_service, f"{LOGO_URL_PREFIX}{nice_service}.png", False)


class LogoResolver:
    """Applies the themed logo lookup to service records."""

    def __init__(self, settings: Settings):
        self.logo_directory = settings.logo_directory

    def resolve(self, name: str) -> LogoResolution:
        return resolve_logo(self.logo_directory, filter_alpha_num(name))

    def apply(self, service: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``service`` with nice_service, has_image and image set."""
        logo = self.resolve(service.get("name") or "")
        return {
            **service,
            "nice_service": logo.nice_service,
            "has_image": logo.has_image,
            "image": logo.image,
        }


def with_stored_image(service: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``service`` with nice_service and the ``<id>.png`` image name."""
    return {
        **service,
        "nice_service": filter_alpha_num(service.get("name") or ""),
        "image": f"{service['id']}.png",
    }
